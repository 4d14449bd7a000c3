import click
from flask.cli import with_appcontext

from alertmap.errors import ConflictError
from alertmap.storage import storage


@click.command("create-user")
@click.argument("username")
@click.argument("password")
@click.option("--reset", is_flag=True, help="Set a new password when the user already exists.")
@with_appcontext
def create_user_command(username, password, reset):
    """Create a user account, or reset its password with --reset."""
    if not 3 <= len(username) <= 50:
        raise click.BadParameter("must be 3 to 50 characters", param_hint="USERNAME")
    if len(password) < 6:
        raise click.BadParameter("must be at least 6 characters", param_hint="PASSWORD")

    user = storage.get_user_by_username(username)
    if user is not None:
        if not reset:
            raise click.ClickException(f"User '{username}' already exists (use --reset to change the password)")
        storage.set_password(user, password)
        click.echo(f"Password for '{username}' updated")
        return

    try:
        user = storage.create_user(username, password)
    except ConflictError as exc:
        raise click.ClickException(exc.message)
    click.echo(f"Created user '{user.username}' (id={user.id})")
