"""image_uploader コアモジュール"""
from .signer import Signer, SigningHeaders, SignedRequest
from .transfer import ObjectTransferClient
from .retry import RetryPolicy
from .session_store import SessionStore
from .uploader import ParallelUploadExecutor, BatchTransferResult, UploadResult
from .api_client import UploadApiClient
from .orchestrator import UploadOrchestrator
from .s3_client import CredentialsProvider, StoreCredentials
from .store import DirectStoreClient, StoredObject
from .task_runner import TaskRunner

__all__ = [
    'Signer',
    'SigningHeaders',
    'SignedRequest',
    'ObjectTransferClient',
    'RetryPolicy',
    'SessionStore',
    'ParallelUploadExecutor',
    'BatchTransferResult',
    'UploadResult',
    'UploadApiClient',
    'UploadOrchestrator',
    'CredentialsProvider',
    'StoreCredentials',
    'DirectStoreClient',
    'StoredObject',
    'TaskRunner',
]
