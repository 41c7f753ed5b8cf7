import click
from flask import current_app
from sqlalchemy.exc import IntegrityError

from .extensions import db
from .models.user import User
from .utils.transaction import transactional


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables that do not exist yet."""
        db.create_all()
        click.echo("Database initialised")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.password_option()
    @click.option("--role", default="editor", show_default=True, help="User role")
    def create_user(email, password, role):
        """Create an operator account."""
        if role not in current_app.config["BUILDER_EDITOR_ROLES"]:
            click.echo(f"Warning: role '{role}' cannot edit builder documents", err=True)

        user = User()
        user.email = email
        user.role = role
        user.set_password(password)

        try:
            with transactional():
                db.session.add(user)
        except IntegrityError:
            raise click.ClickException(f"User {email} already exists")

        click.echo(f"Created {role} {email}")
