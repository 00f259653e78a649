"""Menu blueprint - JSON API over the cart engine, cart kept in the session."""
from flask import Blueprint, jsonify, request, session, current_app

from praiaflow.exceptions import StallNotConfiguredError, ValidationError
from praiaflow.services.cart_service import OrderEngine
from praiaflow.services.catalog_service import CatalogStatus
from praiaflow.services.category_service import format_category, ALL_CATEGORIES
from praiaflow.services.store import get_store
from praiaflow.utils.formatters import money_br

menu_bp = Blueprint('menu', __name__, url_prefix='/menu')


def _stall_key(stall_id: str) -> str:
    """Stall id as stored in the session; the engine normalizes it the same way."""
    key = (stall_id or '').strip()
    if not key:
        raise StallNotConfiguredError()
    return key


def _load_engine(stall_id: str) -> OrderEngine:
    """
    Rebuild the engine of this stall from the session snapshot.

    The snapshot carries the catalog loaded on the first visit, so the store
    is read once per stall and session, failed loads included.
    """
    key = _stall_key(stall_id)
    carts = session.get('cart_by_stall', {})
    return OrderEngine.restore(get_store(), carts.get(key), stall_id=key)


def _save_engine(engine: OrderEngine) -> None:
    """Save the engine snapshot to the session under its stall."""
    carts = dict(session.get('cart_by_stall', {}))
    carts[engine.stall_id] = engine.snapshot()
    session['cart_by_stall'] = carts
    session.modified = True


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _line_payload(line) -> dict:
    return {
        'product_id': line.product_id,
        'name': line.product.name,
        'unit_price': str(line.product.price),
        'quantity': line.quantity,
        'option': line.option,
        'note': line.note,
        'subtotal': str(line.subtotal),
    }


def _menu_payload(engine: OrderEngine) -> dict:
    catalog = engine.catalog
    total = engine.total()

    products = []
    for product in engine.visible_products():
        line = engine.cart.find(product.id)
        products.append({
            **product.to_dict(),
            'category_label': format_category(product.category),
            'options': [o.label for o in catalog.options_for(product.id)],
            'quantity': line.quantity if line else 0,
            'option': line.option if line else None,
            'note': line.note if line else '',
        })

    payload = {
        'stall_id': engine.stall_id,
        'catalog_status': catalog.status.value,
        'categories': [
            {'key': key, 'label': 'Todas' if key == ALL_CATEGORIES else format_category(key)}
            for key in engine.categories()
        ],
        'active_category': engine.active_category,
        'products': products,
        'cart': {
            'customer_name': engine.cart.customer_name,
            'location': engine.cart.location,
            'lines': [_line_payload(line) for line in engine.cart.items],
        },
        'total': str(total),
        'total_display': money_br(total),
        'state': engine.state.value,
    }
    if catalog.status == CatalogStatus.FAILED and catalog.error is not None:
        payload['catalog_error'] = catalog.error.message
    return payload


@menu_bp.route('/', methods=['GET'])
def menu_not_configured():
    """No stall in the scanned code: terminal state, nothing to load."""
    return jsonify({
        'status': 'error',
        'catalog_status': CatalogStatus.NOT_CONFIGURED.value,
        'message': 'QR Code da barraca não encontrado.'
    }), 404


@menu_bp.route('/<stall_id>', methods=['GET'])
def show_menu(stall_id):
    """Catalog view, categories and current cart of a stall."""
    engine = _load_engine(stall_id)
    payload = _menu_payload(engine)
    _save_engine(engine)
    return jsonify(payload)


@menu_bp.route('/<stall_id>/catalog/reload', methods=['POST'])
def reload_catalog(stall_id):
    """Fetch the catalog again; the only way to retry a failed load."""
    engine = _load_engine(stall_id)
    engine.reload_catalog()
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/category', methods=['POST'])
def select_category(stall_id):
    engine = _load_engine(stall_id)
    engine.select_category(_json_body().get('category'))
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/cart/quantity', methods=['POST'])
def adjust_quantity(stall_id):
    data = _json_body()
    try:
        delta = int(data.get('delta', 0))
    except (TypeError, ValueError):
        raise ValidationError('Quantidade inválida')

    engine = _load_engine(stall_id)
    engine.adjust_quantity(str(data.get('product_id') or ''), delta)
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/cart/option', methods=['POST'])
def select_option(stall_id):
    data = _json_body()
    engine = _load_engine(stall_id)
    engine.select_option(str(data.get('product_id') or ''), data.get('option'))
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/cart/note', methods=['POST'])
def set_note(stall_id):
    data = _json_body()
    engine = _load_engine(stall_id)
    engine.set_note(str(data.get('product_id') or ''), data.get('note'))
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/customer', methods=['POST'])
def set_customer(stall_id):
    data = _json_body()
    engine = _load_engine(stall_id)
    engine.set_customer(name=data.get('name'), location=data.get('location'))
    _save_engine(engine)
    return jsonify(_menu_payload(engine))


@menu_bp.route('/<stall_id>/submit', methods=['POST'])
def submit_order(stall_id):
    """Submit the cart; on any failure the session cart is left untouched."""
    engine = _load_engine(stall_id)
    result = engine.submit()
    _save_engine(engine)

    current_app.logger.info(f"[MENU] Order {result.order.id} submitted at stall {engine.stall_id}")
    return jsonify({
        'status': 'success',
        'message': result.message,
        'order_id': result.order.id,
        'order_total': str(result.order.total),
        'menu': _menu_payload(engine),
    }), 201
