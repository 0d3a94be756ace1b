"""アップロードAPI（ネゴシエーション・完了確認）のクライアント"""
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..exceptions import ConfirmationError, NegotiationError
from ..models.upload import ConfirmationResult, UploadMetadata, UploadSlot
from ..utils.logger import LoggerManager


class UploadApiClient:
    """署名付きURLの払い出しとアップロード完了確認を行う"""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 30):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = LoggerManager.get_logger()

    def request_upload_slots(
        self,
        owner_id: str,
        metadata: UploadMetadata,
        images: List[Dict[str, str]],
    ) -> Tuple[str, List[UploadSlot]]:
        """POST /images/upload

        Returns:
            (record_id, UploadSlotのリスト)
        """
        url = f"{self.base_url}/images/upload"
        payload = {
            "userId": owner_id,
            "metadata": metadata.to_dict(),
            "images": images,
        }

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Upload negotiation request failed: {e}")
            raise NegotiationError(f"Negotiation request failed: {e}") from e

        if response.status_code != 200:
            self.logger.error(f"Upload negotiation returned status {response.status_code}")
            raise NegotiationError(
                f"Server error: {response.status_code}", status_code=response.status_code
            )

        body = self._json(response)
        if body is None:
            raise NegotiationError("Invalid response from server", status_code=response.status_code)

        record_id = body.get("recordId")
        uploads = body.get("uploads")
        if not isinstance(record_id, str) or not record_id:
            raise NegotiationError("Response has no recordId", status_code=response.status_code)
        if not isinstance(uploads, list):
            raise NegotiationError("Response has no uploads list", status_code=response.status_code)

        slots = []
        for upload in uploads:
            if not isinstance(upload, dict):
                raise NegotiationError("Malformed upload entry in response", status_code=response.status_code)
            filename = upload.get("filename")
            presigned_url = upload.get("presignedUrl")
            if not isinstance(filename, str) or not isinstance(presigned_url, str):
                raise NegotiationError(
                    f"Malformed upload entry in response: {upload}", status_code=response.status_code
                )
            slots.append(UploadSlot(filename=filename, destination_url=presigned_url))

        self.logger.info(f"Negotiated {len(slots)} upload slots for record {record_id}")
        return record_id, slots

    def confirm_upload(self, record_id: str, checksums: Optional[Dict[str, str]] = None) -> ConfirmationResult:
        """POST /images/{record_id}/confirm

        HTTP 200 でも success=false なら ConfirmationError。
        """
        url = f"{self.base_url}/images/{record_id}/confirm"
        payload: Dict[str, Any] = {}
        if checksums:
            payload["checksums"] = checksums

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"Upload confirmation request failed for {record_id}: {e}")
            raise ConfirmationError(f"Confirmation request failed: {e}") from e

        if response.status_code != 200:
            self.logger.error(
                f"Upload confirmation for {record_id} returned status {response.status_code}"
            )
            raise ConfirmationError(
                f"Confirmation failed with status: {response.status_code}",
                status_code=response.status_code,
            )

        body = self._json(response)
        if body is None or not isinstance(body.get("success"), bool):
            raise ConfirmationError("Invalid response from server", status_code=response.status_code)

        result = ConfirmationResult(
            success=body["success"],
            record_id=body.get("recordId"),
            message=body.get("message"),
        )
        if not result.success:
            self.logger.error(f"Upload confirmation rejected for {record_id}: {result.message}")
            if result.message:
                message = f"Confirmation failed: {result.message} (status: {response.status_code})"
            else:
                message = f"Confirmation failed with status: {response.status_code}"
            raise ConfirmationError(
                message, status_code=response.status_code, server_message=result.message
            )

        self.logger.info(f"Upload confirmed for record {record_id}")
        return result

    def _json(self, response: requests.Response) -> Optional[Dict[str, Any]]:
        try:
            body = response.json()
        except ValueError as e:
            self.logger.error(f"Could not decode JSON response from {response.url}: {e}")
            return None
        if not isinstance(body, dict):
            return None
        return body
