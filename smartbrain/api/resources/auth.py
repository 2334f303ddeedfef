# smartbrain/api/resources/auth.py
from flask import request
from flask_restful import Resource, reqparse
from flask_jwt_extended import jwt_required, get_jwt_identity
from ...services.auth_service import AuthService
from ...services.quota_service import parse_user_id
from ...utils.exceptions import AuthenticationError


class Register(Resource):
    def post(self):
        """Controller: Register a new user"""
        parser = reqparse.RequestParser()
        parser.add_argument('name', type=str, required=True, nullable=False, location='json', help="Name is required")
        parser.add_argument('email', type=str, required=True, nullable=False, location='json', help="Email is required")
        parser.add_argument('password', type=str, required=True, nullable=False, location='json', help="Password is required")
        args = parser.parse_args()

        user = AuthService().register(args['name'].strip(), args['email'].strip(), args['password'])
        return user.to_safe_dict(), 201


class Login(Resource):
    def post(self):
        """Controller: Login and return the user with a JWT token"""
        parser = reqparse.RequestParser()
        parser.add_argument('email', type=str, required=True, nullable=False, location='json', help="Email is required")
        parser.add_argument('password', type=str, required=True, nullable=False, location='json', help="Password is required")
        args = parser.parse_args()

        user, token = AuthService().login(args['email'].strip(), args['password'], request.remote_addr)
        return {**user.to_safe_dict(), "accessToken": token}, 200


class CurrentUser(Resource):
    @jwt_required()
    def get(self):
        """Controller: Get current user info"""
        user_id = parse_user_id(get_jwt_identity())
        if user_id is None:
            raise AuthenticationError("Invalid token subject")
        user = AuthService().get_user_by_id(user_id)
        return user.to_safe_dict(), 200
