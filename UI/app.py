import logging
from datetime import timedelta

import streamlit as st

from timecapsule.core.errors import CapsuleError
from timecapsule.core.display import capsule_card, countdown_badge
from timecapsule.core.lifecycle import earliest_release_date, is_locked, partition, utcnow
from timecapsule.core.models import EnrichmentStatus, MediaFile
from timecapsule.core.routing import (
    CREATE,
    DASHBOARD,
    LOGIN,
    capsule_id_from_route,
    capsule_route,
    resolve_route,
)
from timecapsule.service.auth import AuthGateway
from timecapsule.service.gateway import SupabaseGateway
from timecapsule.service.repository import CapsuleRepository

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Time Capsule",
    layout="centered",
)

# --- Basic Styling ---
st.markdown(
    """
    <style>
    .stApp {
        background: linear-gradient(135deg, #0f172a 0%, #1e3a8a 50%, #312e81 100%);
    }
    .capsule-card {
        background-color: rgba(255, 255, 255, 0.08);
        border: 1px solid rgba(255, 255, 255, 0.18);
        border-radius: 1rem;
        padding: 1rem 1.25rem;
        margin-bottom: 0.75rem;
    }
    .capsule-locked {
        border-color: rgba(245, 158, 11, 0.45);
    }
    .capsule-meta {
        font-size: 0.8rem;
        color: #cbd5e1;
    }
    .countdown {
        background-color: rgba(245, 158, 11, 0.2);
        border-radius: 0.75rem;
        padding: 0.75rem;
        text-align: center;
        color: #fde68a;
        font-weight: 600;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_resource
def get_services():
    """Shared gateway, auth and repository for this Streamlit process."""
    gateway = SupabaseGateway()
    return AuthGateway(gateway), CapsuleRepository(gateway)


auth, repository = get_services()

# --- Session State ---
if "session" not in st.session_state:
    st.session_state.session = None  # timecapsule.core.models.Session once signed in


def navigate(path: str):
    st.query_params["page"] = path
    st.rerun()


def header(title: str):
    left, right = st.columns([4, 1])
    left.title(title)
    if st.session_state.session is not None:
        if right.button("Sign out"):
            auth.sign_out(st.session_state.session)
            st.session_state.session = None
            navigate(LOGIN)


# --- Pages ---
def login_page():
    st.title("⏳ Time Capsule")
    st.caption("Write to your future self.")

    sign_in_tab, sign_up_tab = st.tabs(["Sign in", "Create account"])

    with sign_in_tab:
        with st.form("sign-in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
        if submitted:
            try:
                st.session_state.session = auth.sign_in(email, password)
                navigate(DASHBOARD)
            except CapsuleError as exc:
                st.error(str(exc))

    with sign_up_tab:
        with st.form("sign-up"):
            email = st.text_input("Email", key="sign-up-email")
            password = st.text_input("Password", type="password", key="sign-up-password")
            submitted = st.form_submit_button("Create account")
        if submitted:
            try:
                session = auth.sign_up(email, password)
            except CapsuleError as exc:
                st.error(str(exc))
            else:
                if session is None:
                    st.info("Check your inbox to confirm your email, then sign in.")
                else:
                    st.session_state.session = session
                    navigate(DASHBOARD)


def dashboard_page():
    header("Your Time Capsules")
    session = st.session_state.session

    result = repository.list_capsules(session)
    if not result.is_ok:
        logger.warning(f"Dashboard shows no capsules: {result.error}")
    capsules = result.unwrap_or([])

    now = utcnow()
    locked, unlocked = partition(capsules, now)

    total_col, locked_col, unlocked_col = st.columns(3)
    total_col.metric("Total", len(capsules))
    locked_col.metric("Locked", len(locked))
    unlocked_col.metric("Unlocked", len(unlocked))

    if st.button("➕ Create a new capsule", type="primary"):
        navigate(CREATE)

    if not capsules:
        st.info("No time capsules yet. Create your first one!")
        return

    for capsule in capsules:
        st.markdown(capsule_card(capsule, now), unsafe_allow_html=True)
        if st.button("Open", key=f"open-{capsule.id}"):
            navigate(capsule_route(capsule.id))


def create_page():
    header("Create Time Capsule")
    today = earliest_release_date()
    max_mb = repository.max_media_bytes // (1024 * 1024)

    with st.form("create-capsule"):
        title = st.text_input("Capsule Title", placeholder="Give your time capsule a meaningful title...")
        content = st.text_area(
            "Your Message to the Future",
            height=220,
            placeholder="Write your thoughts, dreams, current situation, or anything you want your future self to remember...",
        )
        release_date = st.date_input(
            "Release Date",
            value=today + timedelta(days=365),
            min_value=today,
            help="Choose when you want this capsule to be unlocked",
        )
        upload = st.file_uploader(
            f"Attach Media (Optional) · Max file size: {max_mb}MB",
            type=["mp3", "wav", "m4a", "ogg", "mp4", "mov", "webm"],
        )
        cancel_col, submit_col = st.columns(2)
        cancelled = cancel_col.form_submit_button("Cancel")
        submitted = submit_col.form_submit_button("Create Time Capsule", type="primary")

    if cancelled:
        navigate(DASHBOARD)

    if submitted:
        media = None
        if upload is not None:
            media = MediaFile(
                filename=upload.name,
                content_type=upload.type or "application/octet-stream",
                data=upload.getvalue(),
            )
        try:
            with st.spinner("Creating Capsule..."):
                repository.create(st.session_state.session, title, content, release_date, media)
        except CapsuleError as exc:
            logger.error(f"Error creating capsule: {exc}")
            st.error(f"Failed to create capsule. {exc}")
        else:
            navigate(DASHBOARD)


def capsule_page(capsule_id: str):
    if st.button("← Back to Dashboard"):
        navigate(DASHBOARD)

    result = repository.get_one(st.session_state.session, capsule_id)
    capsule = result.unwrap_or(None)

    if capsule is None:
        st.header("Capsule Not Found")
        st.write("The capsule you're looking for doesn't exist.")
        return

    if is_locked(capsule):
        locked_view(capsule)
    else:
        unlocked_view(capsule)


def locked_view(capsule):
    st.header(f"🔒 {capsule.title}")
    st.write("This time capsule is locked until")
    st.subheader(f"{capsule.release_at:%B %d, %Y}")

    @st.fragment(run_every=1)
    def countdown():
        badge = countdown_badge(capsule)
        if badge is None:
            # Release time passed while viewing
            st.rerun()
        st.markdown(badge, unsafe_allow_html=True)

    countdown()


def unlocked_view(capsule):
    st.header(f"🔓 {capsule.title}")
    st.caption(f"Created {capsule.created_at:%B %d, %Y} · Released {capsule.release_at:%B %d, %Y}")
    st.write(capsule.content)

    if capsule.has_media:
        media_type = capsule.media_type or ""
        if media_type.startswith("video/"):
            st.video(capsule.media_url)
        elif media_type.startswith("audio/"):
            st.audio(capsule.media_url)
        else:
            st.markdown(f"[Download attachment]({capsule.media_url})")

    status = capsule.enrichment_status
    if capsule.ai_summary:
        st.subheader("🤖 AI Summary")
        st.write(capsule.ai_summary)
    if capsule.ai_future_reply:
        st.subheader("💌 A Message From Your Future Self")
        st.write(capsule.ai_future_reply)
    if status == EnrichmentStatus.PENDING:
        st.caption("AI reflections are still being written. Check back soon.")
    elif status == EnrichmentStatus.FAILED:
        st.caption("AI reflections are unavailable for this capsule.")


# --- Routing ---
requested = st.query_params.get("page", "")
route = resolve_route(requested, st.session_state.session)
if route != requested.strip("/"):
    st.query_params["page"] = route

if route == LOGIN:
    login_page()
elif route == DASHBOARD:
    dashboard_page()
elif route == CREATE:
    create_page()
else:
    capsule_page(capsule_id_from_route(route))
