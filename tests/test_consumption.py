import threading
from datetime import timedelta

import pytest
from sqlalchemy import inspect, insert, update
from sqlalchemy.exc import OperationalError

from donation_vote.exceptions import AlreadyUsed, InvalidTarget, InvalidToken, StorageError
from donation_vote.extensions import db
from donation_vote.models.submission import Submission
from donation_vote.models.vote_token import VoteToken
from donation_vote.services import factory
from donation_vote.services.consumption import VoteConsumption
from donation_vote.services.issuer import TokenIssuer
from donation_vote.services.ledger import SubmissionLedger
from donation_vote.services.notifier import VOTE_CONFIRMATION, VOTE_SUBMITTED
from donation_vote.services.targets import SqlTargetResolver, TargetInfo
from donation_vote.services.token_store import TokenStore
from donation_vote.services.validator import USED, TokenValidator
from donation_vote.utils.time import utc_now_naive

from conftest import RecordingNotifier


@pytest.fixture
def store(app):
    return TokenStore(db.session, app.config["SECRET_KEY"])


@pytest.fixture
def issue(store):
    def _issue(identity="a@x.com", external_ref=1001, window=timedelta(hours=24), clock=None):
        issuer = TokenIssuer(store) if clock is None else TokenIssuer(store, clock=clock)
        return issuer.issue(identity, external_ref, window)
    return _issue


def _workflow(store, resolver=None, notifier=None):
    return VoteConsumption(
        store=store,
        validator=TokenValidator(store),
        resolver=resolver or SqlTargetResolver(db.session),
        notifier=notifier,
    )


def test_issue_check_consume_scenario(store, issue, targets):
    notifier = RecordingNotifier()
    workflow = _workflow(store, notifier=notifier)
    validator = TokenValidator(store)

    secret = issue("a@x.com", 1001, timedelta(hours=24))
    assert validator.check(secret).is_active

    submission = workflow.consume(secret, 7)
    token = store.find_by_secret(secret)
    assert submission.token_id == token.id
    assert submission.target_ref == 7
    assert submission.target_name == "Platform Seven"
    assert submission.identity == "a@x.com"
    assert submission.external_ref == 1001

    assert validator.check(secret).status == USED
    assert token.status == VoteToken.STATUS_USED
    assert token.used_at is not None

    with pytest.raises(InvalidToken) as exc:
        workflow.consume(secret, 7)
    assert exc.value.reason == USED
    assert SubmissionLedger(db.session).count_for_token(token.id) == 1


def test_unknown_token_creates_nothing(store, issue, targets):
    secret = issue()

    with pytest.raises(InvalidToken) as exc:
        _workflow(store).consume("not-a-real-token", 7)

    assert exc.value.reason == "UNKNOWN"
    assert db.session.query(Submission).count() == 0
    token = store.find_by_secret(secret)
    assert token.status == VoteToken.STATUS_ACTIVE
    assert token.used_at is None


def test_expired_token_is_never_consumed(store, issue, targets):
    secret = issue(window=timedelta(hours=1), clock=lambda: utc_now_naive() - timedelta(hours=3))

    with pytest.raises(InvalidToken) as exc:
        _workflow(store).consume(secret, 7)

    assert exc.value.reason == "EXPIRED"
    assert store.find_by_secret(secret).status == VoteToken.STATUS_ACTIVE
    assert db.session.query(Submission).count() == 0


@pytest.mark.parametrize("target_ref", [9, 404])
def test_ineligible_target_leaves_token_active(store, issue, targets, target_ref):
    secret = issue()

    with pytest.raises(InvalidTarget):
        _workflow(store).consume(secret, target_ref)

    assert store.find_by_secret(secret).status == VoteToken.STATUS_ACTIVE
    assert db.session.query(Submission).count() == 0


def test_notifications_fire_after_commit(store, issue, targets):
    notifier = RecordingNotifier()
    secret = issue("a@x.com", 1001)

    _workflow(store, notifier=notifier).consume(secret, 8)

    assert notifier.sent == [
        ("a@x.com", VOTE_CONFIRMATION, {"customer_name": "a@x.com", "platform": "Platform Eight", "order_id": 1001}),
    ]
    kind, data = notifier.operator_sent[0]
    assert kind == VOTE_SUBMITTED
    assert data["customer_email"] == "a@x.com"
    assert data["platform"] == "Platform Eight"


def test_notification_failure_does_not_undo_vote(store, issue, targets):
    secret = issue()

    submission = _workflow(store, notifier=RecordingNotifier(fail=True)).consume(secret, 7)

    assert submission.id is not None
    assert TokenValidator(store).check(secret).status == USED
    assert db.session.query(Submission).count() == 1


def test_returned_submission_is_readable_without_a_session(store, issue, targets):
    secret = issue()

    submission = _workflow(store).consume(secret, 7)

    state = inspect(submission)
    assert state.detached
    assert not state.expired_attributes
    assert submission.id is not None
    assert submission.token_id == store.find_by_secret(secret).id


def test_commit_failure_rolls_back_and_keeps_token_active(store, issue, targets, monkeypatch):
    secret = issue()
    notifier = RecordingNotifier()

    def fail_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db.session, "commit", fail_commit)
    with pytest.raises(StorageError):
        _workflow(store, notifier=notifier).consume(secret, 7)
    monkeypatch.undo()

    token = store.find_by_secret(secret)
    assert token.status == VoteToken.STATUS_ACTIVE
    assert token.used_at is None
    assert db.session.query(Submission).count() == 0
    assert notifier.sent == []


def test_existing_submission_for_token_is_already_used(store, issue, targets):
    secret = issue()
    token_id = store.find_by_secret(secret).id
    with db.engine.begin() as conn:
        conn.execute(insert(Submission).values(
            token_id=token_id,
            identity="a@x.com",
            target_ref=8,
            target_name="Platform Eight",
            external_ref=1001,
            created_at=utc_now_naive(),
        ))

    with pytest.raises(AlreadyUsed):
        _workflow(store).consume(secret, 7)

    db.session.expire_all()
    assert store.find_by_secret(secret).status == VoteToken.STATUS_ACTIVE
    assert SubmissionLedger(db.session).count_for_token(token_id) == 1
    assert SubmissionLedger(db.session).for_token(token_id).target_ref == 8


def test_lost_race_reports_already_used_and_keeps_winner(store, issue, targets):
    """
    Another request spends the token between our validation and our commit.
    The conditional update must miss, and the winner's submission must survive.
    """
    secret = issue()
    token_id = store.find_by_secret(secret).id

    class RacingResolver:
        def resolve(self, target_ref):
            now = utc_now_naive()
            with db.engine.begin() as conn:
                conn.execute(
                    update(VoteToken)
                    .where(VoteToken.id == token_id)
                    .values(status=VoteToken.STATUS_USED, used_at=now)
                )
                conn.execute(insert(Submission).values(
                    token_id=token_id,
                    identity="a@x.com",
                    target_ref=8,
                    target_name="Platform Eight",
                    external_ref=1001,
                    created_at=now,
                ))
            return TargetInfo(exists=True, published=True, display_name="Platform Seven")

    notifier = RecordingNotifier()
    with pytest.raises(AlreadyUsed):
        _workflow(store, resolver=RacingResolver(), notifier=notifier).consume(secret, 7)

    db.session.expire_all()
    winner = SubmissionLedger(db.session).for_token(token_id)
    assert winner.target_ref == 8
    assert SubmissionLedger(db.session).count_for_token(token_id) == 1
    assert notifier.sent == []


def test_concurrent_consumes_record_exactly_one_vote(app, store, issue, targets):
    secret = issue()
    token_id = store.find_by_secret(secret).id
    workers = 8
    barrier = threading.Barrier(workers)
    outcomes = []
    lock = threading.Lock()

    def vote():
        with app.app_context():
            workflow = factory.vote_consumption()
            barrier.wait()
            try:
                workflow.consume(secret, 7)
                result = "ok"
            except AlreadyUsed:
                result = "already_used"
            except InvalidToken as e:
                result = "invalid_" + e.reason.lower()
            except StorageError:
                result = "storage_error"
            finally:
                db.session.remove()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=vote) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert len(outcomes) == workers
    assert outcomes.count("ok") == 1
    assert set(outcomes) <= {"ok", "already_used", "invalid_used"}
    assert SubmissionLedger(db.session).count_for_token(token_id) == 1


def test_ledger_totals_group_by_target(store, issue, targets):
    workflow = _workflow(store)
    for ref, order in [(7, 1), (8, 2), (7, 3)]:
        workflow.consume(issue(f"c{order}@x.com", order), ref)

    assert SubmissionLedger(db.session).totals_by_target() == [
        {"target_ref": 7, "target_name": "Platform Seven", "votes": 2},
        {"target_ref": 8, "target_name": "Platform Eight", "votes": 1},
    ]
