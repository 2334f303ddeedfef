# smartbrain/services/detector_service.py
"""Face detection through the Clarifai REST API."""

import httpx

from ..utils.logger import setup_logger

SUCCESS_STATUS = 10000


class DetectorError(Exception):
    def __init__(self, message, status_code=500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NoFacesDetected(DetectorError):
    def __init__(self, message="No faces detected in the image"):
        super().__init__(message, status_code=400)


def normalize_region(region):
    """Flatten a Clarifai region into the box shape the frontend draws."""
    box = region["region_info"]["bounding_box"]
    value = region.get("value")
    if value is None:
        concepts = region.get("data", {}).get("concepts") or [{}]
        value = concepts[0].get("value", 0)
    return {
        "value": value,
        "topRow": f"{box['top_row']:.3f}",
        "leftCol": f"{box['left_col']:.3f}",
        "bottomRow": f"{box['bottom_row']:.3f}",
        "rightCol": f"{box['right_col']:.3f}",
    }


class DetectorService:
    def __init__(self, pat, user_id, app_id, model_id='face-detection', version_id=None,
                 base_url='https://api.clarifai.com', timeout=10.0, client=None):
        self.pat = pat
        self.user_id = user_id
        self.app_id = app_id
        self.model_id = model_id
        self.version_id = version_id
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.client = client or httpx.Client(timeout=timeout)
        self.logger = setup_logger()

    @classmethod
    def from_config(cls, config, client=None):
        return cls(
            pat=config['CLARIFAI_PAT'],
            user_id=config['CLARIFAI_USER_ID'],
            app_id=config['CLARIFAI_APP_ID'],
            model_id=config['CLARIFAI_MODEL_ID'],
            version_id=config['CLARIFAI_MODEL_VERSION_ID'],
            base_url=config['CLARIFAI_BASE_URL'],
            timeout=config['DETECTOR_TIMEOUT'],
            client=client,
        )

    @property
    def outputs_url(self):
        url = f"{self.base_url}/v2/users/{self.user_id}/apps/{self.app_id}/models/{self.model_id}"
        if self.version_id:
            url += f"/versions/{self.version_id}"
        return url + "/outputs"

    def detect(self, image_url):
        """Service: Return normalized face boxes for the image at `image_url`"""
        payload = {"inputs": [{"data": {"image": {"url": image_url}}}]}
        headers = {"Authorization": f"Key {self.pat}", "Accept": "application/json"}

        try:
            response = self.client.post(self.outputs_url, json=payload, headers=headers, timeout=self.timeout)
        except httpx.TimeoutException:
            self.logger.error(f"Service: Face detection timed out after {self.timeout}s for {image_url}")
            raise DetectorError("Error processing image: detection service timed out")
        except httpx.HTTPError as e:
            self.logger.error(f"Service: Face detection request failed: {str(e)}")
            raise DetectorError(f"Error processing image: {str(e)}")

        try:
            body = response.json()
        except ValueError:
            body = {}
        status = body.get("status") or {}

        if response.status_code >= 400 or status.get("code") != SUCCESS_STATUS:
            description = status.get("description") or response.reason_phrase
            self.logger.error(
                f"Service: Post model outputs failed ({response.status_code}): {description}"
            )
            # Bad input (unreachable URL, not an image) is the caller's fault;
            # credential and provider errors are ours.
            caller_fault = 400 <= response.status_code < 500 and response.status_code not in (401, 403, 429)
            raise DetectorError(
                f"Post model outputs failed: {description}",
                status_code=400 if caller_fault else 500,
            )

        outputs = body.get("outputs") or [{}]
        regions = (outputs[0].get("data") or {}).get("regions")
        if not regions:
            raise NoFacesDetected()

        try:
            boxes = [normalize_region(region) for region in regions]
        except (KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Service: Malformed detection region: {str(e)}")
            raise DetectorError("Error processing image: unexpected detection response")
        self.logger.info(f"Service: Detected {len(boxes)} face(s)")
        return boxes

    def close(self):
        self.client.close()
