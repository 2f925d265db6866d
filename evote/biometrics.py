# evote/biometrics.py
# Simulated biometric checks. There is no capture device or matcher behind
# these; both checks pass after an artificial delay.
import asyncio
from typing import Optional, Tuple

from .config import BIOMETRIC_DELAY, FACE_CONFIDENCE, FINGERPRINT_CONFIDENCE


async def verify_face(captured: str, registered: Optional[str], delay: float = BIOMETRIC_DELAY) -> Tuple[bool, float]:
    """
    Compare a captured face image with the voter's registered profile image.
    Returns (is_match, confidence).
    """
    if delay > 0:
        await asyncio.sleep(delay)
    return True, FACE_CONFIDENCE


async def verify_fingerprint(scan: str, delay: float = BIOMETRIC_DELAY) -> Tuple[bool, float]:
    if delay > 0:
        await asyncio.sleep(delay)
    return True, FINGERPRINT_CONFIDENCE
