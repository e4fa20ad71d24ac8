"""QR payload encoding and rendering for attendance sessions."""
import base64
import io
import json
from typing import Dict, Tuple

import qrcode

from campus_attendance.models.attendance_session import AttendanceSession
from campus_attendance.utils.errors import InvalidQRPayload
from campus_attendance.utils.validators import MAX_ID


class QRService:
    """Service for QR code operations."""

    REQUIRED_FIELDS = ('session_id', 'token')

    @staticmethod
    def build_payload(session: AttendanceSession) -> str:
        """Compact JSON the student app reads back from the code."""
        return json.dumps({
            'session_id': session.id,
            'token': session.token,
            'expires_at': session.expires_at.isoformat()
        }, separators=(',', ':'))

    @staticmethod
    def decode_payload(qr_data: str) -> Tuple[int, str]:
        """Return (session_id, token) from scanned QR text.

        Expiry embedded in the payload is informational only; the stored
        session is authoritative.
        """
        if not isinstance(qr_data, str) or not qr_data.strip():
            raise InvalidQRPayload()
        try:
            data = json.loads(qr_data)
        except json.JSONDecodeError:
            raise InvalidQRPayload()

        if not isinstance(data, dict):
            raise InvalidQRPayload()
        for field in QRService.REQUIRED_FIELDS:
            if field not in data:
                raise InvalidQRPayload(f"Missing field: {field}")

        session_id, token = data['session_id'], data['token']
        if (isinstance(session_id, bool) or not isinstance(session_id, int)
                or not 1 <= session_id <= MAX_ID):
            raise InvalidQRPayload("Invalid session id in QR code")
        if not isinstance(token, str) or not token:
            raise InvalidQRPayload("Invalid token in QR code")
        return session_id, token

    @staticmethod
    def render_png(payload: str) -> str:
        """Render the payload as a base64 PNG data URI."""
        qr = qrcode.QRCode(
            version=None,  # Auto-determine size
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=4,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffered = io.BytesIO()
        img.save(buffered, format="PNG")
        img_str = base64.b64encode(buffered.getvalue()).decode()

        return f"data:image/png;base64,{img_str}"

    @staticmethod
    def session_qr(session: AttendanceSession) -> Dict[str, str]:
        payload = QRService.build_payload(session)
        return {
            'payload': payload,
            'qr_image': QRService.render_png(payload),
            'expires_at': session.expires_at.isoformat()
        }
