"""Command-line interface for creating and checking tokens."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
from safir.click import display_help
from safir.logging import LogLevel, Profile, configure_logging

from .assertion import ClientAssertionGenerator
from .exceptions import TokenError
from .keypair import RSAKeyPair
from .models.enums import Algorithm
from .parser import TokenParser

__all__ = [
    "client_assertion",
    "decode",
    "generate_key",
    "help",
    "main",
    "verify",
]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
@click.option(
    "--log-level",
    envvar="TOKENSMITH_LOG_LEVEL",
    type=click.Choice([level.value for level in LogLevel]),
    default=LogLevel.WARNING.value,
    show_default=True,
    help="Logging level.",
)
def main(*, log_level: str) -> None:
    """Command-line interface for tokensmith."""
    configure_logging(
        name="tokensmith",
        profile=Profile.development,
        log_level=LogLevel(log_level),
    )


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic)


@main.command()
@click.option(
    "--domain",
    required=True,
    help="Base URL of the authorization server, used as the audience.",
)
@click.option("--client-id", required=True, help="Client ID.")
@click.option(
    "--key-file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM-encoded private key of the client.",
)
@click.option(
    "--algorithm",
    type=click.Choice([Algorithm.RS256.value, Algorithm.RS384.value]),
    default=Algorithm.RS256.value,
    show_default=True,
    help="Signing algorithm.",
)
@click.option(
    "--passphrase",
    envvar="TOKENSMITH_KEY_PASSPHRASE",
    default=None,
    help="Passphrase of an encrypted private key.",
)
def client_assertion(
    *,
    domain: str,
    client_id: str,
    key_file: Path,
    algorithm: str,
    passphrase: str | None,
) -> None:
    """Create a signed client assertion.

    The assertion can be sent as the ``client_assertion`` parameter of a
    token request to authenticate the client.
    """
    try:
        generator = ClientAssertionGenerator.create(
            domain,
            client_id,
            key_file.read_bytes(),
            Algorithm(algorithm),
            passphrase=passphrase,
        )
        token = generator.to_string()
    except TokenError as e:
        raise click.ClickException(str(e)) from e
    sys.stdout.write(token + "\n")


@main.command()
@click.argument("token")
def decode(*, token: str) -> None:
    """Print the headers and claims of a token.

    The signature is not checked.
    """
    try:
        parser = TokenParser.parse(token)
    except TokenError as e:
        raise click.ClickException(str(e)) from e
    data = {"headers": parser.headers, "claims": parser.claims}
    sys.stdout.write(json.dumps(data, indent=4) + "\n")


@main.command()
def generate_key() -> None:
    """Generate a new RSA key pair.

    The output will be the private key of the newly-generated key pair, from
    which the public key can be recovered.
    """
    keypair = RSAKeyPair.generate()
    sys.stdout.write(keypair.private_key_as_pem().decode())


@main.command()
@click.argument("token")
@click.option(
    "--algorithm",
    type=click.Choice([a.value for a in Algorithm]),
    default=None,
    help="Required signing algorithm. Any supported algorithm if not set.",
)
@click.option(
    "--jwks-uri",
    default=None,
    help="URI of the key set for RSA signatures.",
)
@click.option(
    "--client-secret",
    envvar="TOKENSMITH_CLIENT_SECRET",
    default=None,
    help="Shared secret for HMAC signatures.",
)
@click.option(
    "--domain",
    envvar="TOKENSMITH_DOMAIN",
    default=None,
    help="Host of the key set if the key set URI does not include one.",
)
def verify(
    *,
    token: str,
    algorithm: str | None,
    jwks_uri: str | None,
    client_secret: str | None,
    domain: str | None,
) -> None:
    """Verify the signature of a token and print its claims."""
    try:
        parser = TokenParser.parse(token, domain=domain)
        parser.verify(algorithm, jwks_uri, client_secret)
    except TokenError as e:
        raise click.ClickException(str(e)) from e
    sys.stdout.write(json.dumps(parser.claims, indent=4) + "\n")
