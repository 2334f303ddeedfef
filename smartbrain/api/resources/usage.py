# smartbrain/api/resources/usage.py
from flask import request
from flask_restful import Resource
from ...utils.exceptions import AuthorizationError


class RemainingRequests(Resource):
    def __init__(self, quota_service):
        self.quota_service = quota_service

    def get(self):
        """Controller: Remaining detection calls for this month"""
        try:
            status = self.quota_service.evaluate(request.args.get('id'))
        except AuthorizationError:
            raise AuthorizationError("Unauthorized", remaining=0, limit=self.quota_service.limit) from None

        return {
            "remaining": status.remaining,
            "used": status.used,
            "limit": status.limit,
            "resetDay": self.quota_service.reset_day,
        }, 200
