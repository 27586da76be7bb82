import click
from flask import current_app
from flask.cli import AppGroup

from . import qr
from .passes import PassError, PassServiceClient
from .scanner import PassScanner

passes_cli = AppGroup("passes", help="Pass QR codes and check-in.")


@passes_cli.command("qr")
@click.argument("token")
@click.option("--output", "-o", type=click.Path(dir_okay=False, writable=True), required=True)
def qr_command(token, output):
    """Write the QR code PNG for TOKEN."""
    try:
        png = qr.encode(token, **qr.qr_options(current_app.config))
    except PassError as e:
        raise click.ClickException(e.message)

    with open(output, "wb") as fh:
        fh.write(png)
    click.echo(f"Wrote {output}")


@passes_cli.command("decode")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
def decode_command(image):
    """Print the pass token held in a QR IMAGE."""
    with open(image, "rb") as fh:
        data = fh.read()

    try:
        token = qr.decode(data, expected_prefix=current_app.config.get("PASS_ID_PREFIX"))
    except PassError as e:
        raise click.ClickException(e.message)
    click.echo(token)


@passes_cli.command("scan")
@click.argument("image", type=click.Path(exists=True, dir_okay=False))
@click.option("--url", default=None, help="Pass service base URL (defaults to PASS_SERVICE_URL).")
def scan_command(image, url):
    """Decode IMAGE locally and redeem the pass it holds."""
    config = current_app.config
    base_url = url or config.get("PASS_SERVICE_URL")
    if not base_url:
        raise click.ClickException("No pass service URL: pass --url or set PASS_SERVICE_URL")

    client = PassServiceClient(
        base_url,
        secret=config.get("PASS_SERVICE_SECRET") or "",
        timeout=config.get("PASS_SERVICE_TIMEOUT", 10),
    )
    scanner = PassScanner(client, expected_prefix=config.get("PASS_ID_PREFIX"))

    try:
        result = scanner.scan_file(image)
    except PassError as e:
        raise click.ClickException(e.message)

    if result.valid:
        click.echo(f"valid user_id={result.user_id} event_id={result.event_id}")
    else:
        click.echo("invalid")
