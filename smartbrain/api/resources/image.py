# smartbrain/api/resources/image.py
from flask import request
from flask_restful import Resource
from ...services.image_service import ImageService
from ...services.quota_service import parse_user_id
from ...utils.exceptions import ValidationError


class ImageEntries(Resource):
    def put(self):
        """Controller: Count a processed image against the user's entries"""
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        user_id = parse_user_id(body.get('id'))
        if user_id is None:
            raise ValidationError("Missing or invalid user ID", field="id")

        image_url = body.get('imageUrl')
        if image_url is not None and not isinstance(image_url, str):
            raise ValidationError("Image URL must be a string", field="imageUrl")

        user = ImageService().record_entry(user_id, image_url, body.get('detectionResults'))
        return user.to_safe_dict(), 200
