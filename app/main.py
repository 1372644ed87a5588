"""
Streamlit Frontend for Property Intake

A chat page that walks the user through creating a property (immeuble)
or a mortgage (hypothèque), one question at a time.

DESIGN PRINCIPLES:
1. One question on screen at a time, answered in plain text
2. A dedicated button for skipping optional fields
3. Errors explained in simple French, the same question asked again
4. Nothing is saved without an explicit "Enregistrer" action

The UI only reads the conversation state. Every change goes through
the intake flow.
"""

import asyncio

import streamlit as st

from property_intake.config import validate_all_settings
from property_intake.models.conversation import TranscriptRole
from property_intake.orchestrator import (
    IncompleteConversationError,
    IntakeFlow,
    MortgageIntakeFlow,
    PropertyIntakeFlow,
    create_app_components,
)
from property_intake.services.storage import StorageError
from property_intake.wizard.summary import format_amount


# Page configuration
st.set_page_config(
    page_title="Ajout d'immeuble",
    page_icon="🏢",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except StorageError as e:
        st.error(f"Impossible de joindre le serveur : {e}")
        return create_app_components(use_storage=False)


def main():
    """Main application entry point."""
    storage, audit_logger = get_components()

    st.sidebar.title("🏢 Immeubles")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Aller à :",
        ["🏠 Nouvel immeuble", "🏦 Nouvelle hypothèque", "📋 Immeubles", "⚙️ Paramètres"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **Comment ça marche :**
        1. Réponds aux questions une à une
        2. Écris « passer » ou clique sur Passer pour un champ facultatif
        3. Vérifie le récapitulatif, puis enregistre
        """
    )

    if page == "🏠 Nouvel immeuble":
        render_property_page(storage, audit_logger)
    elif page == "🏦 Nouvelle hypothèque":
        render_mortgage_page(storage, audit_logger)
    elif page == "📋 Immeubles":
        render_properties_page(storage)
    elif page == "⚙️ Paramètres":
        render_settings_page()


def render_conversation(flow: IntakeFlow, key: str):
    """Render the transcript, the answer box and the action buttons."""
    state = flow.state

    for entry in state.transcript:
        if entry.role == TranscriptRole.USER:
            with st.chat_message("user"):
                st.markdown(entry.text)
        elif entry.role == TranscriptRole.SUMMARY:
            with st.chat_message("assistant"):
                st.info(entry.text)
        else:
            with st.chat_message("assistant"):
                st.markdown(entry.text)

    if not state.completed:
        question = flow.engine.current_question
        st.caption(f"Question {state.step_index + 1} sur {state.total_steps}")

        answer = st.chat_input("Ta réponse…", key=f"{key}_input")
        if answer is not None:
            run_async(flow.submit(answer))
            st.rerun()

        if question is not None and question.is_optional:
            if st.button("⏭️ Passer", key=f"{key}_skip"):
                run_async(flow.skip_current())
                st.rerun()
        return

    if flow.saved is not None:
        st.success(f"✅ Enregistré (n° {flow.saved.id})")
        if st.button("🔁 Recommencer", key=f"{key}_restart"):
            run_async(flow.start())
            st.rerun()
        return

    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Enregistrer", type="primary", key=f"{key}_save"):
            try:
                run_async(flow.commit())
                st.rerun()
            except IncompleteConversationError:
                st.warning("Il reste des questions à répondre.")
            except StorageError as e:
                st.error(f"L'enregistrement a échoué : {e}")
            except ValueError as e:
                st.error(f"Certaines réponses ne sont pas cohérentes : {e}")
    with col2:
        if st.button("🔁 Recommencer", key=f"{key}_restart"):
            run_async(flow.start())
            st.rerun()


def render_property_page(storage, audit_logger):
    """Render the property wizard."""
    st.title("🏠 Nouvel immeuble")

    if "property_flow" not in st.session_state:
        flow = PropertyIntakeFlow(storage=storage, audit_logger=audit_logger)
        run_async(flow.start())
        st.session_state.property_flow = flow

    render_conversation(st.session_state.property_flow, "property")


def render_mortgage_page(storage, audit_logger):
    """Render the mortgage wizard for a chosen property."""
    st.title("🏦 Nouvelle hypothèque")

    try:
        properties = run_async(storage.list_properties())
    except StorageError as e:
        st.error(f"Impossible de charger les immeubles : {e}")
        return

    if not properties:
        st.info("Ajoute d'abord un immeuble avant de saisir une hypothèque.")
        return

    chosen = st.selectbox(
        "Immeuble",
        options=properties,
        format_func=lambda p: p.draft.name,
    )

    flow = st.session_state.get("mortgage_flow")
    if flow is None or flow.property_id != chosen.id:
        flow = MortgageIntakeFlow(chosen.id, storage=storage, audit_logger=audit_logger)
        run_async(flow.start())
        st.session_state.mortgage_flow = flow

    render_conversation(flow, "mortgage")


def render_properties_page(storage):
    """Render the list of saved properties."""
    st.title("📋 Immeubles")

    try:
        properties = run_async(storage.list_properties())
    except StorageError as e:
        st.error(f"Impossible de charger les immeubles : {e}")
        return

    if not properties:
        st.info("Aucun immeuble pour l'instant. Utilise la page « Nouvel immeuble ».")
        return

    for stored in properties:
        draft = stored.draft
        with st.expander(f"{draft.name} (n° {stored.id})"):
            st.markdown(f"**Adresse :** {draft.address or '—'}")
            st.markdown(f"**Acquis le :** {draft.acquisition_date or '—'}")
            if draft.purchase_price is not None:
                st.markdown(f"**Prix d'achat :** {format_amount(draft.purchase_price)}")
            if draft.current_value is not None:
                st.markdown(f"**Valeur actuelle :** {format_amount(draft.current_value)}")
            if draft.notes:
                st.markdown(draft.notes)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Paramètres")

    st.markdown("### Configuration")

    status = validate_all_settings()

    sections = [
        ("Conversation", "wizard"),
        ("Serveur (API REST)", "api"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Non configuré")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown(
        "Sans `PROPERTY_API_BASE_URL`, les fiches sont gardées en mémoire "
        "et perdues à la fermeture de l'application."
    )


if __name__ == "__main__":
    main()
