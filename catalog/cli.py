import click
from flask.cli import AppGroup

from catalog.extensions import db
from catalog.services import category_service, seed_service

categories_cli = AppGroup("categories", help="Manage the category hierarchy.")


@categories_cli.command("seed")
def seed():
    """Create the default category tree."""
    created = seed_service.seed_categories(db.session)
    click.echo(f"Seeded {len(created)} categories.")


@categories_cli.command("rebuild-levels")
def rebuild_levels():
    """Recompute every category level from its parent chain."""
    changed = category_service.rebuild_levels(db.session)
    click.echo(f"Updated level on {changed} categories.")


@categories_cli.command("tree")
def tree():
    """Print the category tree."""
    stack = [(node, 0) for node in reversed(category_service.build_tree(db.session))]
    while stack:
        node, depth = stack.pop()
        status = "" if node["isActive"] else " (inactive)"
        click.echo(f"{'  ' * depth}{node['name']} [{node['slug']}]{status}")
        stack.extend(
            (child, depth + 1) for child in reversed(node.get("children", []))
        )
