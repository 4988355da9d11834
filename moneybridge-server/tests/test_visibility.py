import pytest

from moneybridge.modules.accounts import Account
from moneybridge.modules.mobile_money import Party, VisibilityScope, mask_number, redact, visible_requests
from moneybridge.modules.mobile_money.visibility import first_name, mask_email, viewer_relation

REQUESTER = Account(id="requester", username="rahim", role="user", is_active=True)
FULFILLER = Account(id="fulfiller", username="karim", role="user", is_active=True)
STRANGER = Account(id="stranger", username="salma", role="user", is_active=True)
ADMIN = Account(id="admin", username="admin", role="super_admin", is_active=True)


@pytest.mark.parametrize(
    ("number", "expected"),
    [
        ("01712345678", "017******78"),
        ("+8801712345678", "+88*********78"),
        ("12345", "*****"),
        ("", ""),
    ],
)
def test_mask_number(number, expected):
    assert mask_number(number) == expected


def test_mask_number_custom_window():
    assert mask_number("01712345678", head=2, tail=3) == "01******678"


def test_mask_email_and_first_name():
    assert mask_email("karim@example.com") == "k***m@example.com"
    assert mask_email("ab@example.com") == "a*@example.com"
    assert mask_email(None) is None
    assert first_name("Karim Uddin Ahmed") == "Karim"


@pytest.mark.parametrize(
    ("status", "fulfiller_id", "actor", "visible"),
    [
        ("PENDING", None, STRANGER, True),
        ("PENDING", None, REQUESTER, True),
        ("ACCEPTED", "fulfiller", STRANGER, False),
        ("ACCEPTED", "fulfiller", FULFILLER, True),
        ("VERIFIED", "fulfiller", FULFILLER, True),
        ("CANCELLED", None, REQUESTER, True),
        ("CANCELLED", None, STRANGER, False),
        ("EXPIRED", None, ADMIN, True),
    ],
)
def test_visibility_scope(make_request, status, fulfiller_id, actor, visible):
    request = make_request(status, fulfiller_id=fulfiller_id)
    assert visible_requests(actor).allows(request) is visible


def test_admin_scope_bypasses_filters():
    scope = visible_requests(ADMIN)
    assert scope == VisibilityScope(actor_id="admin", is_admin=True)


def test_browser_gets_masked_view(make_request):
    request = make_request(
        requester=Party(id="requester", name="Rahim Uddin", email="rahim@example.com"),
        description="rent",
    )
    view = redact(request, STRANGER)
    assert view.viewer_relation == "browser"
    assert view.masked
    assert view.recipient_number == "017******78"
    assert view.requester.name == "Rahim"
    assert view.requester.email == "r***m@example.com"
    assert view.amount_cents == request.amount_cents


def test_browser_never_sees_evidence(make_request):
    request = make_request(
        "FULFILLED",
        fulfiller_id="fulfiller",
        transaction_id="TX1",
        sender_number="01811111111",
        notes="paid",
    )
    view = redact(request, STRANGER)
    assert view.transaction_id is None
    assert view.sender_number is None
    assert view.notes is None


@pytest.mark.parametrize(("actor", "relation"), [(REQUESTER, "requester"), (FULFILLER, "fulfiller"), (ADMIN, "admin")])
def test_participants_see_everything(make_request, actor, relation):
    request = make_request("ACCEPTED", fulfiller_id="fulfiller")
    view = redact(request, actor)
    assert viewer_relation(request, actor) == relation
    assert not view.masked
    assert view.recipient_number == "01712345678"
