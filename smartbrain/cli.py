# smartbrain/cli.py
import click
from .core.database import connect
from .repositories.user_repository import UserRepository
from .services.auth_service import hash_password

DEMO_USERS = [
    {"name": "John Doe", "email": "test@email.com", "password": "secret", "entries": 3, "is_authorized": False},
    {"name": "Bob Cat", "email": "bob@email.com", "password": "secret2", "entries": 5, "is_authorized": False},
    {"name": "John", "email": "admin@email.com", "password": "admin", "entries": 172, "is_authorized": True},
]


def seed_users(users=DEMO_USERS):
    """Create any missing demo users; existing emails are left untouched."""
    repository = UserRepository()
    created = []
    for data in users:
        if repository.get_user_by_email(data["email"]):
            continue
        created.append(repository.create_user(
            data["name"],
            data["email"],
            hash_password(data["password"]),
            is_authorized=data["is_authorized"],
            entries=data["entries"],
        ))
    return created


def register_commands(app):
    @app.cli.command('seed-db')
    def seed_db():
        """Create tables and insert the demo users."""
        connect(app)
        created = seed_users()
        click.echo(f"Database has been seeded ({len(created)} new users)")

    @app.cli.command('authorize-user')
    @click.argument('email')
    @click.option('--revoke', is_flag=True, help="Remove API access instead of granting it.")
    def authorize_user(email, revoke):
        """Grant or revoke access to the face-detection endpoint."""
        user = UserRepository().set_authorized(email, not revoke)
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        state = "revoked" if revoke else "granted"
        click.echo(f"API access {state} for {email}")
