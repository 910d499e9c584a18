"""Command-line interface for the Bitcoin REST client."""

import sys
import json
from typing import Optional, Tuple
import click

from bitcoin_rest.core.decoder import RestFormat
from bitcoin_rest.core.errors import BitcoinRESTError
from bitcoin_rest.core.rest_client import BitcoinRESTClient
from bitcoin_rest.models.blockchain import (
    NULL_INDEX, CBlock, CBlockHeader, COutPoint, CTransaction, witness_stack
)
from bitcoin_rest.models.config import RestClientConfig
from bitcoin_rest.utils.bitcoin import hash_to_hex, hex_to_hash
from bitcoin_rest.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

FORMAT_OPTION = click.option(
    '--format', '-f', 'fmt', default='bin',
    type=click.Choice([f.value for f in RestFormat]),
    help='Response encoding to request from the node'
)


def header_to_dict(header: CBlockHeader) -> dict:
    return {
        'hash': hash_to_hex(header.GetHash()),
        'version': header.nVersion,
        'previousblockhash': hash_to_hex(header.hashPrevBlock),
        'merkleroot': hash_to_hex(header.hashMerkleRoot),
        'time': header.nTime,
        'bits': f"{header.nBits:08x}",
        'nonce': header.nNonce,
    }


def transaction_to_dict(tx: CTransaction) -> dict:
    return {
        'txid': hash_to_hex(tx.GetTxid()),
        'hash': hash_to_hex(tx.GetHash()),
        'version': tx.nVersion,
        'locktime': tx.nLockTime,
        'vin': [
            {
                'txid': hash_to_hex(txin.prevout.hash),
                'vout': txin.prevout.n,
                'scriptSig': bytes(txin.scriptSig).hex(),
                'sequence': txin.nSequence,
                'txinwitness': [item.hex() for item in witness_stack(tx, i)],
            }
            for i, txin in enumerate(tx.vin)
        ],
        'vout': [
            {'n': n, 'value_sat': txout.nValue, 'scriptPubKey': bytes(txout.scriptPubKey).hex()}
            for n, txout in enumerate(tx.vout)
        ],
    }


def block_to_dict(block: CBlock) -> dict:
    result = header_to_dict(block.get_header())
    result['tx'] = [transaction_to_dict(tx) for tx in block.vtx]
    return result


def parse_outpoint(value: str) -> COutPoint:
    """Parse ``<txid>:<n>`` (``<txid>-<n>`` is accepted too)."""
    for sep in (':', '-'):
        if sep in value:
            txid, _, n = value.rpartition(sep)
            break
    else:
        raise click.BadParameter(f"expected TXID:N, got {value!r}")
    try:
        index = int(n)
        if not 0 <= index <= NULL_INDEX:
            raise ValueError(f"output index out of range: {index}")
        return COutPoint(hex_to_hash(txid, field='txid'), index)
    except (BitcoinRESTError, ValueError) as e:
        raise click.BadParameter(f"{value!r}: {e}")


def _emit(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _run(ctx, action):
    """Run ``action(client)`` and turn library errors into exit status 1."""
    config = ctx.obj['config']
    try:
        with BitcoinRESTClient(config) as client:
            _emit(action(client))
    except BitcoinRESTError as e:
        logger.error("Command failed", command=ctx.info_name, error=str(e))
        click.echo(f"❌ {type(e).__name__}: {e}", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"❌ {e}", err=True)
        sys.exit(1)


@click.group()
@click.option('--config-file', '-c', type=click.Path(exists=True),
              help='Path to configuration file')
@click.option('--endpoint', '-e', default=None,
              help='REST endpoint (default: BITCOIN_REST_ENDPOINT or http://localhost:8332/rest/)')
@click.option('--log-level', '-l', default='WARNING',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.pass_context
def cli(ctx, config_file: Optional[str], endpoint: Optional[str], log_level: str):
    """Bitcoin Core REST interface client."""
    ctx.ensure_object(dict)

    try:
        if config_file:
            config = RestClientConfig(_env_file=config_file)
        else:
            config = RestClientConfig()

        if endpoint:
            config.endpoint = endpoint
        config.log_level = log_level

        setup_logging(config)
        ctx.obj['config'] = config

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument('height', type=int)
@FORMAT_OPTION
@click.pass_context
def blockhash(ctx, height: int, fmt: str):
    """Print the hash of the block at HEIGHT."""
    _run(ctx, lambda client: hash_to_hex(client.blockhashbyheight(height, RestFormat(fmt))))


@cli.command()
@click.argument('block_hash')
@FORMAT_OPTION
@click.pass_context
def block(ctx, block_hash: str, fmt: str):
    """Print a block with all its transactions."""
    _run(ctx, lambda client: block_to_dict(client.block(block_hash, RestFormat(fmt))))


@cli.command()
@click.argument('block_hash')
@FORMAT_OPTION
@click.pass_context
def header(ctx, block_hash: str, fmt: str):
    """Print the header of a block."""
    _run(ctx, lambda client: header_to_dict(client.block_notxdetails(block_hash, RestFormat(fmt))))


@cli.command()
@click.argument('count', type=click.IntRange(min=1))
@click.argument('block_hash')
@FORMAT_OPTION
@click.pass_context
def headers(ctx, count: int, block_hash: str, fmt: str):
    """Print up to COUNT headers starting at BLOCK_HASH."""
    _run(ctx, lambda client: [header_to_dict(h) for h in client.headers(count, block_hash, RestFormat(fmt))])


@cli.command()
@click.argument('txid')
@FORMAT_OPTION
@click.pass_context
def tx(ctx, txid: str, fmt: str):
    """Print a transaction."""
    _run(ctx, lambda client: transaction_to_dict(client.tx(txid, RestFormat(fmt))))


@cli.command()
@click.pass_context
def chaininfo(ctx):
    """Print chain state."""
    _run(ctx, lambda client: client.chaininfo().model_dump(mode='json'))


@cli.command()
@click.argument('outpoints', nargs=-1, required=True)
@click.option('--check-mempool', '-m', is_flag=True,
              help='Take the mempool into account')
@click.pass_context
def getutxos(ctx, outpoints: Tuple[str, ...], check_mempool: bool):
    """Query the UTXO set for OUTPOINTS given as TXID:N."""
    parsed = [parse_outpoint(value) for value in outpoints]

    def action(client):
        result = client.getutxos(parsed, check_mempool=check_mempool)
        return {
            'chainHeight': result.chain_height,
            'chaintipHash': hash_to_hex(result.chaintip_hash),
            'bitmap': result.bitmap,
            'outpoints': [
                {
                    'outpoint': f"{hash_to_hex(outpoint.hash)}:{outpoint.n}",
                    'utxo': utxo.model_dump(mode='json') if utxo else None,
                }
                for outpoint, utxo in result.match(parsed)
            ],
        }

    _run(ctx, action)


@cli.command()
@click.pass_context
def test_connection(ctx):
    """Test the connection to the node's REST interface."""
    config = ctx.obj['config']

    click.echo(f"🔍 Testing REST connection to {config.base_url} ...")
    with BitcoinRESTClient(config) as client:
        if client.test_connection():
            click.echo("✅ REST connection successful")
        else:
            click.echo("❌ REST connection failed", err=True)
            sys.exit(1)


@cli.command()
def version():
    """Show version information."""
    from bitcoin_rest import __version__, __description__

    click.echo(f"bitcoin-rest v{__version__}")
    click.echo(__description__)


if __name__ == '__main__':
    cli()
