"""ストレージ認証情報の取得"""
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import CredentialsError
from ..models.config import StoreConfig
from ..utils.logger import LoggerManager
from .signer import Signer


@dataclass(frozen=True)
class StoreCredentials:
    """署名に使う認証情報"""
    access_key: str
    secret_key: str
    session_token: Optional[str] = None


class CredentialsProvider:
    """認証情報の解決と管理

    優先順位: 設定ファイルのキー -> AssumeRole -> プロファイル / デフォルトチェーン
    """

    def __init__(self, store_config: StoreConfig):
        self.store_config = store_config
        self.logger = LoggerManager.get_logger()
        self._credentials: Optional[StoreCredentials] = None

    def get_credentials(self) -> StoreCredentials:
        """認証情報を取得（必要に応じて解決）"""
        if self._credentials is None:
            self._credentials = self._resolve()
        return self._credentials

    def create_signer(self) -> Signer:
        credentials = self.get_credentials()
        return Signer(
            credentials.access_key,
            credentials.secret_key,
            self.store_config.region,
            session_token=credentials.session_token,
        )

    def _resolve(self) -> StoreCredentials:
        config = self.store_config

        if config.access_key_id and config.secret_access_key:
            self.logger.info("Using store credentials from configuration.")
            return StoreCredentials(config.access_key_id, config.secret_access_key)

        if config.assume_role:
            return self._assume_role()

        try:
            session = self._session()
            credentials = session.get_credentials()
        except BotoCoreError as e:
            self.logger.error(f"Error loading AWS credentials: {e}")
            raise CredentialsError(f"Error loading credentials: {e}") from e

        if credentials is None:
            self.logger.error("AWS credentials not available.")
            raise CredentialsError("No store credentials available")

        frozen = credentials.get_frozen_credentials()
        self.logger.info("Using store credentials from the default credential chain.")
        return StoreCredentials(frozen.access_key, frozen.secret_key, frozen.token)

    def _session(self) -> boto3.Session:
        if self.store_config.profile:
            return boto3.Session(profile_name=self.store_config.profile)
        return boto3.Session()

    def _assume_role(self) -> StoreCredentials:
        """AssumeRoleを実行して一時的な認証情報を取得"""
        assume_role_config = self.store_config.assume_role

        try:
            sts_client = self._session().client(
                'sts',
                region_name=self.store_config.region,
            )

            assume_role_params = {
                'RoleArn': assume_role_config.role_arn,
                'RoleSessionName': assume_role_config.session_name,
                'DurationSeconds': assume_role_config.duration_seconds,
            }

            if assume_role_config.external_id:
                assume_role_params['ExternalId'] = assume_role_config.external_id

            response = sts_client.assume_role(**assume_role_params)
            credentials = response['Credentials']

        except (ClientError, BotoCoreError) as e:
            self.logger.error(f"Error assuming role: {e}")
            raise CredentialsError(f"Error assuming role {assume_role_config.role_arn}: {e}") from e

        self.logger.info(f"Assumed role successfully: {assume_role_config.role_arn}")

        return StoreCredentials(
            access_key=credentials['AccessKeyId'],
            secret_key=credentials['SecretAccessKey'],
            session_token=credentials['SessionToken'],
        )
