"""Web state layer against the real app: settings propagation and content editing over HTTP."""
import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from brandportal.backend.config import get_settings
from brandportal.backend.database import Base, get_test_engine
from brandportal.backend.deps import get_db
from brandportal.backend.main import app
from brandportal.backend.services.settings_cache import get_settings_cache
from brandportal.errors import NotAuthorizedError
from brandportal.web.api_client import PortalApiClient
from brandportal.web.branding import BrandingPropagator, CounterClock, DocumentState, resolve_logo
from brandportal.web.config import DEFAULT_FAVICON, DEFAULT_PUBLIC_SETTINGS
from brandportal.web.content_editor import ContentEditor
from brandportal.web.context import PortalContext


@pytest.fixture
def test_db_session():
    get_settings_cache().clear()
    engine = get_test_engine()
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def override_get_db(test_db_session):
    def _get_db():
        try:
            yield test_db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    yield _get_db
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def context(override_get_db):
    s = get_settings()
    api = PortalApiClient(TestClient(app))
    api.login(s.admin_default_username, s.admin_default_password)
    return PortalContext(api)


@pytest.mark.timeout(20)
def test_setting_change_reaches_every_document(context):
    propagator = BrandingPropagator(context, clock=CounterClock())
    first = propagator.attach(DocumentState())
    propagator.start()
    second = propagator.attach(DocumentState())

    default_title = get_settings().default_site_title
    assert first.title == second.title == default_title

    context.update_setting("primaryColor", "#9c9c9c")
    context.update_setting("siteTitle", "Acme Client Portal")

    for doc in (first, second):
        assert doc.title == "Acme Client Portal"
        assert doc.css_vars["--primary"] == "0.0 0.0% 61.2%"
        assert doc.css_vars["--primary-foreground"] == "0 0% 10%"
    propagator.stop()


@pytest.mark.timeout(20)
def test_logo_upload_busts_cache_only_once(context, tmp_path, monkeypatch):
    monkeypatch.setattr(get_settings(), "upload_dir", str(tmp_path))
    propagator = BrandingPropagator(context, clock=CounterClock(100))
    doc = propagator.attach(DocumentState())
    propagator.start()
    assert doc.logo_src is None

    url = context.upload_logo("brand.png", b"\x89PNG\r\n\x1a\nfake", "image/png")

    assert doc.logo_src.startswith(f"{url}?t=")
    token_src = doc.logo_src
    mutations = doc.mutations

    # unrelated refresh keeps the same token and touches nothing
    context.invalidate("settings/public")
    assert doc.logo_src == token_src
    assert doc.mutations == mutations
    propagator.stop()


@pytest.mark.timeout(20)
def test_admin_resource_fails_for_anonymous_caller(override_get_db):
    context = PortalContext(PortalApiClient(TestClient(app)))
    sub = context.subscribe("settings")
    assert isinstance(sub.error, NotAuthorizedError)
    assert sub.value is None
    sub.close()


@pytest.mark.timeout(20)
def test_propagator_uses_defaults_when_settings_unreachable():
    def handler(request):
        return httpx.Response(503, json={"message": "db down"})

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://portal.test")
    context = PortalContext(PortalApiClient(http))
    propagator = BrandingPropagator(context, clock=CounterClock())
    doc = propagator.attach(DocumentState())
    propagator.start()

    assert doc.title == DEFAULT_PUBLIC_SETTINGS["siteTitle"]
    assert doc.links["icon"] == f"{DEFAULT_FAVICON}?t=1"
    assert resolve_logo(propagator.state).text == "S"


@pytest.mark.timeout(20)
def test_editor_saves_over_http(context):
    editor = ContentEditor(context, "home", defaults={"title": "Welcome"})
    editor.load()
    assert editor.value("title") == "Welcome"

    editor.set_text("title", "Hello from Acme")
    assert editor.save("title").ok
    assert editor.saved_values()["title"] == "Hello from Acme"

    public = context.subscribe("content/type/home")
    assert [(r["identifier"], r["content"]) for r in public.value] == [("title", "Hello from Acme")]

    editor.set_text("title", "Second draft")
    editor.save("title")
    assert [r["content"] for r in public.value] == ["Second draft"]
    public.close()
    editor.close()


@pytest.mark.timeout(20)
@pytest.mark.parametrize("identifier", ["billing/invoices", "why?", "faq#3", "50% off"])
def test_identifier_with_url_characters_round_trips(context, identifier):
    context.update_content("faq", identifier, {"answer": "Monthly"})

    public = context.subscribe("content/type/faq")
    assert [(r["identifier"], r["content"]) for r in public.value] == [(identifier, {"answer": "Monthly"})]

    context.delete_content("faq", identifier)
    assert public.value == []
    public.close()
