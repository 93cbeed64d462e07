"""
Streamlit UI for the fragrance storefront.

Features:
- Shop tab with per-product size selector and add-to-cart
- Cart panel with +/- controls, customer type and delivery toggles
- Hosted checkout redirect
- Admin tabs for products (add, edit, delete) and store settings
"""
import streamlit as st
import pandas as pd
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from storefront.config.settings import get_settings, configure_logging
from storefront.engine import (
    Cart,
    CustomerClassification,
    add_variant,
    change_quantity,
    remove_variant,
    reprice,
    subtotal,
    delivery_cost,
    total,
    item_count,
    to_checkout_payload,
)
from storefront.services.catalog_service import CatalogService
from storefront.services.settings_service import SettingsService
from storefront.services.checkout_service import CheckoutService, CheckoutError
from storefront.ui.forms import variant_frame, variants_from_frame


st.set_page_config(
    page_title="Aromatic Scents",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_services():
    """Get cached service instances."""
    configure_logging()
    settings = get_settings()
    settings_service = SettingsService(settings.settings_csv)
    return (
        CatalogService(settings.products_csv, settings.variants_csv),
        settings_service,
        CheckoutService(settings_service, settings=settings),
    )


try:
    catalog_service, settings_service, checkout_service = get_services()
    products = catalog_service.list_products()
    store_settings = settings_service.get_store_settings()
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


def money(amount) -> str:
    return f"R{amount:,.2f}"


# Session state: the cart lives here and nowhere else
if 'cart' not in st.session_state:
    st.session_state.cart = Cart()
if 'customer_type' not in st.session_state:
    st.session_state.customer_type = CustomerClassification.REGULAR


# ============================================================================
# SUCCESS PAGE
# ============================================================================
if st.query_params.get("session_id"):
    st.title("Order Successful!")
    st.success("Thank you for your purchase. A confirmation email is on its way.")
    st.caption(f"Reference: {st.query_params.get('session_id')}")
    if st.button("Continue Shopping"):
        st.query_params.clear()
        st.session_state.cart = Cart()
        st.rerun()
    st.stop()

if st.query_params.get("canceled"):
    st.info("Checkout was canceled. Your cart is still here.")


# ============================================================================
# SIDEBAR: Cart
# ============================================================================
with st.sidebar:
    st.header(f"🛍️ Cart ({item_count(st.session_state.cart)})")

    selected_type = st.radio(
        "Customer Type",
        options=[CustomerClassification.REGULAR, CustomerClassification.RESELLER],
        format_func=lambda c: c.value.title(),
        key="customer_type_input",
        index=0 if st.session_state.customer_type == CustomerClassification.REGULAR else 1,
    )
    if selected_type != st.session_state.customer_type:
        st.session_state.customer_type = selected_type
        st.session_state.cart = reprice(st.session_state.cart, selected_type, store_settings, products)
        st.rerun()

    cart = st.session_state.cart
    classification = st.session_state.customer_type

    if cart.is_empty:
        st.info("Your cart is empty")
    else:
        for line in cart:
            with st.container(border=True):
                st.markdown(f"**{line.name}** ({line.size_ml}ml)")
                price_note = " · Bulk Price" if line.is_bulk_price else ""
                st.caption(f"{money(line.unit_price)} each{price_note}")
                c1, c2, c3, c4 = st.columns([1, 1, 1, 1])
                if c1.button("➖", key=f"dec_{line.variant_id}"):
                    st.session_state.cart = change_quantity(cart, line.variant_id, -1, classification, store_settings, products)
                    st.rerun()
                c2.markdown(f"**{line.quantity}**")
                if c3.button("➕", key=f"inc_{line.variant_id}"):
                    st.session_state.cart = change_quantity(cart, line.variant_id, 1, classification, store_settings, products)
                    st.rerun()
                if c4.button("🗑️", key=f"rm_{line.variant_id}"):
                    st.session_state.cart = remove_variant(cart, line.variant_id)
                    st.rerun()

        st.divider()
        include_delivery = st.checkbox(
            f"Include delivery ({money(store_settings.delivery_cost)})",
            key="include_delivery",
        )
        st.markdown(f"Subtotal: **{money(subtotal(cart))}**")
        if include_delivery:
            st.markdown(f"Delivery: **{money(delivery_cost(True, store_settings))}**")
        st.metric("Total", money(total(cart, include_delivery, store_settings)))

        if st.button("Checkout", type="primary", use_container_width=True):
            try:
                session = checkout_service.create_session(
                    to_checkout_payload(cart), include_delivery, classification
                )
                st.link_button("Continue to secure payment", session.url or "#", use_container_width=True)
            except CheckoutError:
                st.error("Payment failed. Please try again.")


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("Aromatic Scents")
st.caption("Exquisite fragrances, curated for those who appreciate the art of scent")

tab1, tab2, tab3 = st.tabs(["🌸 Shop", "📦 Products", "⚙️ Settings"])


# ============================================================================
# TAB 1: SHOP
# ============================================================================
with tab1:
    in_stock = [p for p in products if p.in_stock]
    if not in_stock:
        st.info("No fragrances are available right now.")

    cols = st.columns(3)
    for i, product in enumerate(in_stock):
        with cols[i % 3]:
            with st.container(border=True):
                if product.image_url:
                    st.image(product.image_url, use_container_width=True)
                title = f"{product.name} ✨" if product.is_new_arrival else product.name
                st.subheader(title)
                st.caption(product.description)

                available = product.available_variants()
                variant = st.selectbox(
                    "Size",
                    options=available,
                    format_func=lambda v: f"{v.size_ml}ml · {money(v.regular_price)}",
                    key=f"size_{product.id}",
                )
                if variant is not None and variant.bulk_price is not None and store_settings.bulk_discount_enabled:
                    st.caption(f"Resellers: {money(variant.bulk_price)} each from {variant.bulk_min_quantity} units")

                if variant is not None and st.button("Add to Cart", key=f"add_{product.id}", type="primary"):
                    st.session_state.cart = add_variant(
                        st.session_state.cart, product, variant,
                        st.session_state.customer_type, store_settings,
                    )
                    st.rerun()


# ============================================================================
# TAB 2: PRODUCT ADMIN
# ============================================================================
with tab2:
    st.subheader("📦 Products")

    rows = []
    for product in products:
        for v in product.variants:
            rows.append({
                'Product': product.name,
                'Size (ml)': v.size_ml,
                'Regular': float(v.regular_price),
                'Bulk': float(v.bulk_price) if v.bulk_price is not None else None,
                'Bulk Min': v.bulk_min_quantity if v.bulk_price is not None else None,
                'Stock': v.stock_quantity,
                'New': product.is_new_arrival,
            })
    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    with st.expander("➕ Add Product"):
        with st.form("new_product"):
            name = st.text_input("Name")
            description = st.text_area("Description")
            image_url = st.text_input("Image URL")
            is_new = st.checkbox("New arrival")
            st.caption("Variants")
            variants_df = st.data_editor(
                variant_frame(),
                num_rows="dynamic",
                use_container_width=True,
                column_config={'id': None},
                key="new_variants",
            )
            if st.form_submit_button("Save", type="primary"):
                try:
                    catalog_service.create_product(
                        {'name': name, 'description': description, 'image_url': image_url, 'is_new_arrival': is_new},
                        variants_from_frame(variants_df),
                    )
                    st.toast("Product saved")
                    st.rerun()
                except ValueError as e:
                    st.error(f"Error saving product: {e}")

    with st.expander("✏️ Edit Product"):
        editing = st.selectbox("Product", options=products, format_func=lambda p: p.name, key="edit_pick")
        if editing is not None:
            with st.form(f"edit_product_{editing.id}"):
                name = st.text_input("Name", value=editing.name)
                description = st.text_area("Description", value=editing.description)
                image_url = st.text_input("Image URL", value=editing.image_url)
                is_new = st.checkbox("New arrival", value=editing.is_new_arrival)
                st.caption("Variants")
                edited_df = st.data_editor(
                    variant_frame(editing),
                    num_rows="dynamic",
                    use_container_width=True,
                    column_config={'id': None},
                    key=f"edit_variants_{editing.id}",
                )
                if st.form_submit_button("Update", type="primary"):
                    try:
                        catalog_service.update_product(
                            editing.id,
                            {'name': name, 'description': description, 'image_url': image_url, 'is_new_arrival': is_new},
                            variants_from_frame(edited_df),
                        )
                        st.toast(f"Updated {name}")
                        st.rerun()
                    except ValueError as e:
                        st.error(f"Error updating product: {e}")

    with st.expander("🗑️ Delete Product"):
        doomed = st.selectbox("Product", options=products, format_func=lambda p: p.name, key="delete_pick")
        if doomed is not None and st.button("Delete", type="secondary"):
            catalog_service.delete_product(doomed.id)
            st.toast(f"Deleted {doomed.name}")
            st.rerun()


# ============================================================================
# TAB 3: STORE SETTINGS
# ============================================================================
with tab3:
    st.subheader("⚙️ Store Settings")
    current = settings_service.get_all()
    with st.form("settings"):
        new_delivery = st.text_input("Delivery cost (R)", value=current.get('delivery_cost', '0'))
        new_bulk = st.checkbox("Bulk discount enabled", value=current.get('bulk_discount_enabled') == 'true')
        if st.form_submit_button("Save Settings", type="primary"):
            settings_service.update({
                'delivery_cost': new_delivery.strip(),
                'bulk_discount_enabled': 'true' if new_bulk else 'false',
            })
            st.toast("Settings saved")
            st.rerun()
