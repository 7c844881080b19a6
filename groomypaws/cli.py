"""CLI tools for Groomy Paws administration."""

import click

from groomypaws.db.base import Base
from groomypaws.db.enums import Role
from groomypaws.db.session import SessionLocal, engine
from groomypaws.services import auth_service, automation_service


@click.group()
def cli():
    """Groomy Paws CLI tools."""
    pass


@cli.command()
@click.option("--email", required=True, help="Admin email address")
@click.option("--name", required=True, help="Display name")
@click.option("--password", required=True, prompt=True, hide_input=True, help="Initial password")
def create_admin(email: str, name: str, password: str):
    """
    Create an admin account, or promote an existing user to admin.

    Example:
        groomypaws create-admin --email "owner@groomypaws.com" --name "Owner"
    """
    db = SessionLocal()
    try:
        user = auth_service.get_user_by_email(db, email)
        if user:
            user.role = Role.ADMIN.value
            db.commit()
            click.echo(f"✓ Promoted {user.email} to admin")
            return

        user = auth_service.register_user(db, email=email, password=password, name=name)
        user.role = Role.ADMIN.value
        db.commit()
        click.echo(f"✓ Created admin {user.email}")
        click.echo(f"  ID: {user.id}")

    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


@cli.command()
def init_db():
    """
    Create all tables directly from the models.

    For development only; production databases are managed with alembic.
    """
    from groomypaws.db import models  # noqa: F401 - register tables

    Base.metadata.create_all(bind=engine)
    click.echo("✓ Tables created")

    db = SessionLocal()
    try:
        added = automation_service.seed_default_sla_targets(db)
        click.echo(f"✓ Seeded {added} SLA target(s)")
    finally:
        db.close()


@cli.command()
def seed_sla_targets():
    """Insert the default SLA targets that are missing."""
    db = SessionLocal()
    try:
        added = automation_service.seed_default_sla_targets(db)
        click.echo(f"✓ Seeded {added} SLA target(s)")
    except Exception as e:
        db.rollback()
        click.echo(f"❌ Error: {e}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
