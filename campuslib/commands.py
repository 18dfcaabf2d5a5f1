import click
from flask import current_app

from campuslib.services.auth_service import AuthService
from campuslib.utils.errors import LibraryError


def register_commands(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--name", default="Administrator", show_default=True)
    def create_admin(email, password, name):
        """Create an admin account (there is no admin signup endpoint)."""
        try:
            user = AuthService.register(name=name, email=email, password=password, role="admin")
        except LibraryError as e:
            raise click.ClickException(e.message)
        current_app.logger.info(f"[auth] admin created user={user.id}")
        click.echo(f"Admin created: id={user.id} email={user.email}")
