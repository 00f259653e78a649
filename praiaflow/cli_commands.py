"""
Flask CLI commands for stall catalog management.

Commands:
- flask init-db: Create the database tables
- flask seed-catalog FILE: Load a stall catalog from a JSON file
- flask list-orders --stall ID: Show submitted orders of a stall
"""

import json

import click
from sqlalchemy.exc import SQLAlchemyError

from praiaflow import database
from praiaflow.models import Product, ProductOption, CustomerOrder
from praiaflow.utils.formatters import money_br, to_money


def seed_catalog(session, data):
    """
    Insert the products (and their options) described by ``data``.

    Format::

        {"stall_id": "barraca-1",
         "products": [{"name": "Água", "price": 5, "category": "Bebidas",
                       "options": ["Pequeno", "Grande"]}]}

    Returns the number of products created.

    Raises:
        ValueError: missing stall_id or invalid product entry.
    """
    stall_id = str(data.get('stall_id') or '').strip()
    if not stall_id:
        raise ValueError('stall_id is required')

    created = 0
    for entry in data.get('products', []):
        name = str(entry.get('name') or '').strip()
        if not name:
            raise ValueError(f'Product without name: {entry!r}')

        product = Product(
            stall_id=stall_id,
            name=name,
            price=to_money(entry.get('price')),
            category=entry.get('category'),
            active=bool(entry.get('active', True)),
        )
        for label in entry.get('options', []):
            product.options.append(ProductOption(label=str(label).strip(), active=True))

        session.add(product)
        created += 1

    session.commit()
    return created


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create all tables."""
        database.create_tables()
        click.echo(click.style('✅ Tabelas criadas.', fg='green'))

    @app.cli.command('seed-catalog')
    @click.argument('path', type=click.Path(exists=True, dir_okay=False))
    def seed_catalog_command(path):
        """Load a stall catalog from a JSON file."""
        with open(path, encoding='utf-8') as fh:
            try:
                data = json.load(fh)
            except json.JSONDecodeError as e:
                click.echo(click.style(f'❌ JSON inválido: {e}', fg='red'))
                return

        session = database.get_session()
        try:
            created = seed_catalog(session, data)
        except (ValueError, SQLAlchemyError) as e:
            session.rollback()
            click.echo(click.style(f'❌ Erro ao carregar o cardápio: {e}', fg='red'))
            return

        click.echo(click.style(f'✅ {created} produtos carregados para {data["stall_id"]}', fg='green'))

    @app.cli.command('list-orders')
    @click.option('--stall', 'stall_id', required=True, help='Stall identifier')
    def list_orders_command(stall_id):
        """List orders of a stall with their lines."""
        session = database.get_session()
        orders = (session.query(CustomerOrder)
                  .filter(CustomerOrder.stall_id == stall_id)
                  .order_by(CustomerOrder.created_at)
                  .all())

        if not orders:
            click.echo(f'Sem pedidos para {stall_id}')
            return

        for order in orders:
            click.echo(f'{order.id}  {order.customer_name} @ {order.location}  '
                       f'{money_br(order.total)}  [{order.status}]')
            if not order.lines:
                click.echo(click.style('   ⚠ pedido sem itens', fg='yellow'))
            for line in order.lines:
                notes = f' ({line.notes})' if line.notes else ''
                click.echo(f'   {line.quantity} x {line.product.name} {money_br(line.unit_price)}{notes}')
