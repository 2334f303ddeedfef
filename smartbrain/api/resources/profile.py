# smartbrain/api/resources/profile.py
from flask_restful import Resource
from ...services.auth_service import AuthService
from ...services.quota_service import parse_user_id
from ...utils.exceptions import ValidationError


class Profile(Resource):
    def get(self, id):
        """Controller: Public profile of a user"""
        user_id = parse_user_id(id)
        if user_id is None:
            raise ValidationError("Missing or invalid user ID", field="id")
        user = AuthService().get_user_by_id(user_id)
        profile = user.to_safe_dict()
        profile.pop("isAuthorized")
        return profile, 200
