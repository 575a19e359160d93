from email.message import EmailMessage
from unittest import mock

import pytest
from imapclient import SEEN
from imapclient.exceptions import IMAPClientError, LoginError

from domain.errors import MailAccessError, MailConnectionError
from domain.models import MailboxConfig
from infrastructure.email import imap_client
from infrastructure.email.imap_client import IMAPInbox
from interface_adapters.controllers.report_controller import read_unread_mails


def _config(**kw) -> MailboxConfig:
    base = dict(username="john@x.com", secret="s3cret", host="imap.x.com", enable_auth=True, port="993")
    base.update(kw)
    return MailboxConfig(**base)


def _raw_message() -> bytes:
    msg = EmailMessage()
    msg["From"] = "alice@x.com"
    msg["To"] = "bob@y.com, carol@y.com"
    msg["Cc"] = "dave@y.com"
    msg["Subject"] = "Hi"
    msg.set_content("hello there")
    msg.add_attachment(b"data", maintype="application", subtype="octet-stream", filename="d.bin")
    return bytes(msg)


@pytest.fixture
def client(monkeypatch):
    fake = mock.MagicMock()
    factory = mock.Mock(return_value=fake)
    monkeypatch.setattr(imap_client, "IMAPClient", factory)
    fake.factory = factory
    return fake


def _names(fake):
    return [c[0] for c in fake.mock_calls if c[0] and c[0] != "factory"]


def test_open_logs_in_and_selects_read_write(client):
    with IMAPInbox(_config(timeout=5.0)):
        pass
    client.factory.assert_called_once_with("imap.x.com", port=993, ssl=True, timeout=5.0)
    client.login.assert_called_once_with("john@x.com", "s3cret")
    client.select_folder.assert_called_once_with("INBOX", readonly=False)
    assert _names(client) == ["login", "noop", "select_folder", "close_folder", "logout"]


def test_no_login_without_auth(client):
    with IMAPInbox(_config(enable_auth=False)):
        pass
    client.login.assert_not_called()


def test_login_failure_leaves_nothing_open(client):
    client.login.side_effect = LoginError("bad credentials")
    with pytest.raises(MailConnectionError):
        with IMAPInbox(_config()):
            pytest.fail("no debería entrar")
    client.shutdown.assert_called_once_with()
    client.close_folder.assert_not_called()
    client.logout.assert_not_called()


def test_refused_connection_is_connection_error(client):
    client.factory.side_effect = ConnectionRefusedError("refused")
    with pytest.raises(ConnectionError):
        read_unread_mails(_config())
    client.shutdown.assert_not_called()


def test_folder_not_selectable_is_connection_error(client):
    client.select_folder.side_effect = IMAPClientError("no such mailbox")
    with pytest.raises(MailConnectionError):
        with IMAPInbox(_config()):
            pass
    client.close_folder.assert_not_called()
    client.shutdown.assert_called_once_with()


def test_use_outside_session_is_connection_error():
    with pytest.raises(MailConnectionError):
        IMAPInbox(_config()).search_unseen()


def test_search_keeps_server_order(client):
    client.search.return_value = [9, 2, 5]
    with IMAPInbox(_config()) as inbox:
        assert inbox.search_unseen() == [9, 2, 5]
    client.search.assert_called_once_with(["UNSEEN"])


def test_fetch_uses_peek_and_parses(client):
    client.fetch.return_value = {7: {b"BODY[]": _raw_message(), b"SEQ": 1}}
    with IMAPInbox(_config()) as inbox:
        rec = inbox.fetch_message(7)
    client.fetch.assert_called_once_with([7], ["BODY.PEEK[]"])
    assert rec.to_addrs == ("bob@y.com", "carol@y.com")


def test_fetch_missing_message_is_access_error(client):
    client.fetch.return_value = {}
    with IMAPInbox(_config()) as inbox:
        with pytest.raises(MailAccessError):
            inbox.fetch_message(7)


def test_read_unread_mails_end_to_end(client):
    client.search.return_value = [7]
    client.fetch.return_value = {7: {b"BODY[]": _raw_message(), b"SEQ": 1}}

    out = read_unread_mails(_config())

    assert out == "From: alice@x.com\nTo: bob@y.com,carol@y.com\nCC: dave@y.com\nSubject: Hi\n\nhello there\n\n\n\n"
    client.add_flags.assert_called_once_with([7], [SEEN])
    names = _names(client)
    assert names.index("add_flags") < names.index("fetch")
    assert names[-2:] == ["close_folder", "logout"]


def test_failure_mid_run_still_releases_once(client):
    client.search.return_value = [7, 8]
    client.fetch.side_effect = IMAPClientError("connection reset")

    with pytest.raises(MailAccessError):
        read_unread_mails(_config())

    client.add_flags.assert_called_once_with([7], [SEEN])
    client.close_folder.assert_called_once_with()
    client.logout.assert_called_once_with()
    assert _names(client)[-2:] == ["close_folder", "logout"]


def test_flag_failure_is_access_error(client):
    client.search.return_value = [7]
    client.add_flags.side_effect = OSError("broken pipe")
    with pytest.raises(MailAccessError):
        read_unread_mails(_config())
    client.fetch.assert_not_called()
    client.logout.assert_called_once_with()


def test_cleanup_error_does_not_mask_logout(client):
    client.close_folder.side_effect = IMAPClientError("close failed")
    with IMAPInbox(_config()):
        pass
    client.logout.assert_called_once_with()
