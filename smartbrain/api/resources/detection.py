# smartbrain/api/resources/detection.py
from flask import request
from flask_restful import Resource
from ...utils.exceptions import ValidationError


class FaceDetection(Resource):
    def __init__(self, pipeline):
        self.pipeline = pipeline

    def post(self, id=None):
        """Controller: Detect faces in the submitted image URL"""
        body = request.get_json(silent=True) or {}
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        outcome = self.pipeline.run(
            body=body,
            view_args={'id': id} if id is not None else None,
            query_args=request.args,
        )
        if not outcome.served:
            raise outcome.rejection.to_error()
        return outcome.boxes, 200
