"""Tests for core mail logic."""

from datetime import datetime, timezone

from organizer.core.mail import (
    Email,
    EmailAddress,
    decode_base64url,
    emails_in_folder,
    encode_base64url,
    folder_counts,
    parse_address_list,
    parse_email_address,
    sort_newest_first,
    unread_count,
)


def make_email(id, folder="inbox", read=False, day=1):
    return Email(
        id=id,
        subject=f"Subject {id}",
        sender=EmailAddress("Ada", "ada@example.com"),
        to=[EmailAddress("", "me@example.com")],
        body="",
        date=datetime(2025, 1, day, tzinfo=timezone.utc),
        read=read,
        folder=folder,
    )


class TestParseEmailAddress:
    def test_quoted_name(self):
        addr = parse_email_address('"Lovelace, Ada" <ada@example.com>')
        assert addr == EmailAddress("Lovelace, Ada", "ada@example.com")

    def test_unquoted_name(self):
        assert parse_email_address("Ada <ada@example.com>") == EmailAddress("Ada", "ada@example.com")

    def test_bare_address(self):
        assert parse_email_address(" ada@example.com ") == EmailAddress("", "ada@example.com")

    def test_empty(self):
        assert parse_email_address("") == EmailAddress("", "")

    def test_address_list(self):
        addrs = parse_address_list("Ada <ada@example.com>, bob@example.com")
        assert [a.email for a in addrs] == ["ada@example.com", "bob@example.com"]

    def test_format(self):
        assert EmailAddress("Ada", "ada@example.com").format() == "Ada <ada@example.com>"
        assert EmailAddress("", "ada@example.com").format() == "ada@example.com"


class TestBase64Url:
    def test_decodes_unpadded(self):
        assert decode_base64url(encode_base64url("héllo wörld?")) == "héllo wörld?"

    def test_empty(self):
        assert decode_base64url("") == ""


class TestEmailDocument:
    def test_sender_stored_as_from(self):
        doc = make_email("1").to_dict()
        assert doc["from"] == {"name": "Ada", "email": "ada@example.com"}
        assert Email.from_dict(doc).sender.email == "ada@example.com"


class TestFolders:
    def test_sort_newest_first(self):
        emails = [make_email("old", day=1), make_email("new", day=3), make_email("mid", day=2)]
        assert [e.id for e in sort_newest_first(emails)] == ["new", "mid", "old"]

    def test_emails_in_folder(self):
        emails = [make_email("1"), make_email("2", folder="sent")]
        assert [e.id for e in emails_in_folder(emails, "sent")] == ["2"]

    def test_unread_count(self):
        emails = [make_email("1"), make_email("2", read=True), make_email("3", folder="spam")]
        assert unread_count(emails, "inbox") == 1

    def test_folder_counts_cover_default_folders(self):
        emails = [make_email("1"), make_email("2"), make_email("3", folder="trash")]
        counts = folder_counts(emails)
        assert counts == {"inbox": 2, "sent": 0, "drafts": 0, "trash": 1, "spam": 0}
