from types import SimpleNamespace

import pytest

from grocery_api.main import create_app
from grocery_api.models import OrderStatus
from grocery_api.worker import OrderNotifier, celery, send_order_email


def _order():
    return SimpleNamespace(id=3, order_status=OrderStatus.PENDING, user=SimpleNamespace(email="alice@example.com"))


@pytest.fixture()
def eager_celery():
    celery.conf.task_always_eager = True
    yield celery
    celery.conf.task_always_eager = False


def test_send_order_email_task():
    assert send_order_email.apply(args=("alice@example.com", 3, "PENDING")).get() is True


def test_disabled_notifier_does_not_enqueue(monkeypatch):
    calls = []
    monkeypatch.setattr(send_order_email, "delay", lambda *args: calls.append(args))

    OrderNotifier(enabled=False).order_status_changed(_order())

    assert calls == []


def test_enabled_notifier_enqueues(monkeypatch):
    calls = []
    monkeypatch.setattr(send_order_email, "delay", lambda *args: calls.append(args))

    OrderNotifier(enabled=True).order_status_changed(_order())

    assert calls == [("alice@example.com", 3, "PENDING")]


def test_enabled_notifier_runs_task_eagerly(eager_celery):
    result = OrderNotifier(enabled=True).order_status_changed(_order())

    assert result.get() is True


@pytest.fixture()
def restore_celery_conf():
    broker_url, result_backend = celery.conf.broker_url, celery.conf.result_backend
    yield celery
    celery.conf.update(broker_url=broker_url, result_backend=result_backend)


def test_create_app_configures_broker(settings, restore_celery_conf):
    broker_url = "redis://broker.internal:6380/2"

    app = create_app(settings.model_copy(update={"broker_url": broker_url}))

    assert app.state.notifier.enabled
    assert celery.conf.broker_url == broker_url
    assert celery.conf.result_backend == broker_url
