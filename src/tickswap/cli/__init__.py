import click


@click.group()
@click.version_option(package_name="tickswap")
def cli() -> None: ...


from . import pool, swap  # noqa: F401, E402
