"""
AWS Account Identity Lookup.

Resolves the account id used to build Lambda ARNs in the deploy client.

Resolution order:
    1. Explicit value (service definition "account_id" or constructor arg)
    2. AWS_ACCOUNT_ID environment variable
    3. STS GetCallerIdentity with the ambient credentials

Exports:
    resolve_account_id: Layered account id lookup
    get_caller_account_id: STS lookup only
"""

import os
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config.defaults import EnvVars
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "AwsIdentity")


def get_caller_account_id(region: Optional[str] = None, sts_client=None) -> str:
    """
    Account id of the ambient credentials.

    Raises:
        ConfigurationError: If credentials are missing or STS rejects the call
    """
    client = sts_client or boto3.client("sts", region_name=region)
    try:
        identity = client.get_caller_identity()
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError(f"Unable to determine AWS account id: {e}") from e

    account_id = identity.get("Account")
    if not account_id:
        raise ConfigurationError("Unable to determine AWS account id: empty STS response")

    logger.debug(f"Resolved account id from STS: ...{account_id[-4:]}")
    return account_id


def resolve_account_id(
    explicit: Optional[str] = None,
    region: Optional[str] = None,
    sts_client=None
) -> str:
    if explicit:
        return explicit

    from_env = os.environ.get(EnvVars.ACCOUNT_ID)
    if from_env:
        return from_env

    return get_caller_account_id(region, sts_client)
