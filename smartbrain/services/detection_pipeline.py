# smartbrain/services/detection_pipeline.py
"""Request pipeline for the metered face-detection endpoint.

A request moves through ResolveIdentity, CheckAuthorization, CheckQuota,
RecordUsage, InvokeDetector and finally Served. Each step either hands a
value to the next one or stops the request with a Rejection that names
what went wrong; nothing is retried. Usage is recorded before the detector
is called, so a failed detection still counts against the month.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..utils.exceptions import (
    APIError,
    AuthorizationError,
    DetectionError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from ..utils.logger import setup_logger
from .detector_service import DetectorError, NoFacesDetected
from .quota_service import parse_user_id

DETECTION_ENDPOINT = '/api/clarifai'


class ErrorKind(Enum):
    INVALID_IDENTITY = 'invalid_identity'
    VALIDATION = 'validation'
    NOT_FOUND = 'not_found'
    NOT_AUTHORIZED = 'not_authorized'
    QUOTA_EXCEEDED = 'quota_exceeded'
    DETECTION_FAILED = 'detection_failed'
    NO_FACES = 'no_faces'


@dataclass
class Rejection:
    kind: ErrorKind
    message: str
    status_code: int
    context: Dict[str, Any] = field(default_factory=dict)

    def to_error(self) -> APIError:
        """Translate into the HTTP-facing error for the boundary handler."""
        if self.kind in (ErrorKind.INVALID_IDENTITY, ErrorKind.VALIDATION):
            return ValidationError(self.message, field=self.context.get('field'))
        if self.kind is ErrorKind.NOT_FOUND:
            return NotFoundError("User")
        if self.kind is ErrorKind.NOT_AUTHORIZED:
            return AuthorizationError(self.message)
        if self.kind is ErrorKind.QUOTA_EXCEEDED:
            return RateLimitError(self.message, limit=self.context['limit'], reset=self.context['reset'])
        return DetectionError(self.message, status_code=self.status_code)


@dataclass
class PipelineOutcome:
    user_id: Optional[int] = None
    boxes: List[Dict[str, Any]] = field(default_factory=list)
    rejection: Optional[Rejection] = None

    @property
    def served(self) -> bool:
        return self.rejection is None


def resolve_user_id(body=None, view_args=None, query_args=None) -> Optional[int]:
    """First positive integer id from the body, then the route, then the query string."""
    for source in (body, view_args, query_args):
        if not isinstance(source, Mapping):
            continue
        user_id = parse_user_id(source.get('id'))
        if user_id is not None:
            return user_id
    return None


def resolve_image_url(body) -> Optional[str]:
    if not isinstance(body, Mapping):
        return None
    image_url = body.get('imageUrl') or body.get('IMAGE_URL')
    if not isinstance(image_url, str):
        return None
    image_url = image_url.strip()
    parsed = urlparse(image_url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None
    return image_url


def _from_api_error(error: APIError) -> Rejection:
    if isinstance(error, RateLimitError):
        return Rejection(ErrorKind.QUOTA_EXCEEDED, error.message, 429,
                         {'limit': error.limit, 'reset': error.reset})
    if isinstance(error, AuthorizationError):
        return Rejection(ErrorKind.NOT_AUTHORIZED, error.message, 403)
    if isinstance(error, NotFoundError):
        return Rejection(ErrorKind.NOT_FOUND, error.message, 404)
    if isinstance(error, ValidationError):
        return Rejection(ErrorKind.INVALID_IDENTITY, error.message, 400, {'field': error.field})
    return Rejection(ErrorKind.DETECTION_FAILED, error.message, error.status_code)


class DetectionPipeline:
    def __init__(self, quota_service, detector, image_service, endpoint=DETECTION_ENDPOINT):
        self.quota_service = quota_service
        self.detector = detector
        self.image_service = image_service
        self.endpoint = endpoint
        self.logger = setup_logger()

    def run(self, body=None, view_args=None, query_args=None) -> PipelineOutcome:
        outcome = PipelineOutcome()

        # ResolveIdentity
        outcome.user_id = resolve_user_id(body, view_args, query_args)
        if outcome.user_id is None:
            return self._reject(outcome, Rejection(
                ErrorKind.INVALID_IDENTITY, "Unauthorized - User ID not provided", 400, {'field': 'id'}))
        image_url = resolve_image_url(body)
        if image_url is None:
            return self._reject(outcome, Rejection(
                ErrorKind.VALIDATION, "Image URL is required", 400, {'field': 'imageUrl'}))

        # CheckAuthorization
        rejection = self._attempt(self.quota_service.authorize, outcome.user_id)
        if rejection:
            return self._reject(outcome, rejection)

        # CheckQuota + RecordUsage, one transaction
        rejection = self._attempt(self.quota_service.reserve, outcome.user_id, self.endpoint)
        if rejection:
            return self._reject(outcome, rejection)

        # InvokeDetector
        try:
            outcome.boxes = self.detector.detect(image_url)
        except NoFacesDetected as e:
            return self._reject(outcome, Rejection(ErrorKind.NO_FACES, e.message, 400))
        except DetectorError as e:
            return self._reject(outcome, Rejection(ErrorKind.DETECTION_FAILED, e.message, e.status_code))

        # Served
        self.image_service.record_entry(outcome.user_id, image_url, outcome.boxes)
        self.logger.info(f"Service: Served {len(outcome.boxes)} box(es) to user ID {outcome.user_id}")
        return outcome

    def _attempt(self, step, *args) -> Optional[Rejection]:
        try:
            step(*args)
        except APIError as e:
            return _from_api_error(e)
        return None

    def _reject(self, outcome, rejection) -> PipelineOutcome:
        outcome.rejection = rejection
        self.logger.info(
            f"Service: Rejected detection for user ID {outcome.user_id}: "
            f"{rejection.kind.value} ({rejection.message})"
        )
        return outcome
