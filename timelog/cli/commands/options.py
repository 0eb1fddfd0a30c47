"""List the configured classification options."""

import click

from timelog.cli.error_handlers import with_error_handling
from timelog.cli.utils.formatters import format_options
from timelog.cli.utils.runtime import load_settings
from timelog.dialogue import ConfigOptionSource


@click.command(name="options")
@click.option("--debug", is_flag=True, help="Show full stack traces on errors")
def list_options(debug: bool):
    """Show the matters, cost centres, business areas and subcategories.

    Example:
        timelog options
    """
    with with_error_handling(debug):
        source = ConfigOptionSource(load_settings())
        sections = [
            ("Matters/Clients", source.matters()),
            ("Cost Centres", source.cost_centres()),
            ("Business Areas", source.business_areas()),
            ("Subcategories", source.subcategories()),
        ]
        for title, values in sections:
            click.echo(click.style(title, bold=True))
            click.echo(format_options(values) if values else "  (none configured)")
            click.echo()
