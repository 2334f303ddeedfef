from flask_restful import Resource
from ...services.auth_service import AuthService


class HealthCheck(Resource):
    def get(self):
        """Controller: Check API health & list available routes"""
        routes = {
            "status": "healthy",
            "message": "SmartBrain API is running",
            "routes": {
                "/": "Health check & list all routes",
                "/api": "List users with their entry counts",
                "/api/register": "Register new user",
                "/api/login": "Login user",
                "/api/auth/me": "Get current user info",
                "/api/profile/<id>": "Get a user's profile",
                "/api/image": "Record a processed image entry",
                "/api/clarifai": "Detect faces in an image URL (metered)",
                "/api/requests/remaining": "Remaining detection calls this month",
            }
        }
        return routes, 200


class UserList(Resource):
    def get(self):
        """Controller: Public user list"""
        users = AuthService().list_users()
        return [
            {"id": user.id, "name": user.name, "entries": user.entries, "joined": user.joined.isoformat()}
            for user in users
        ], 200
