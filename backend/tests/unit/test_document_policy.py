"""Unit tests for the document authorization policy"""

import pytest

from docshelf.domain.documents.sensitivity import Sensitivity
from docshelf.errors import AuthorizationError
from docshelf.policies.document_policy import DocumentAction, allows, authorize
from docshelf.sharing.service import SharingLedger


class TestDocumentPolicy:
    """Test every action for owner, grantee and stranger"""

    def test_owner_allowed_everything(self, alice, make_document):
        document = make_document(alice)

        for action in DocumentAction:
            assert allows(alice, action, document), action

    def test_stranger_denied(self, alice, carol, make_document):
        document = make_document(alice)

        for action in DocumentAction:
            if action == DocumentAction.CREATE:
                continue
            assert not allows(carol, action, document), action

    def test_grantee_view_only(self, db_session, alice, bob, make_document):
        document = make_document(alice)
        SharingLedger(db_session).grant(document, "bob@example.com", granted_by=alice, can_download=False)

        assert allows(bob, DocumentAction.VIEW, document)
        assert not allows(bob, DocumentAction.DOWNLOAD, document)
        assert not allows(bob, DocumentAction.UPDATE, document)
        assert not allows(bob, DocumentAction.DELETE, document)
        assert not allows(bob, DocumentAction.SHARE, document)
        assert not allows(bob, DocumentAction.CHANGE_VISIBILITY, document)

    def test_grantee_with_download(self, db_session, alice, bob, make_document):
        document = make_document(alice)
        SharingLedger(db_session).grant(document, "bob@example.com", granted_by=alice)

        assert allows(bob, DocumentAction.DOWNLOAD, document)

    def test_sensitive_blocks_visibility_change_for_owner(self, alice, make_document):
        document = make_document(alice, sensitivity=Sensitivity.SENSITIVE)

        assert not allows(alice, DocumentAction.CHANGE_VISIBILITY, document)
        assert allows(alice, DocumentAction.UPDATE, document)

    def test_create_requires_actor(self, alice):
        assert allows(alice, DocumentAction.CREATE)
        assert not allows(None, DocumentAction.CREATE)

    def test_anonymous_denied(self, alice, make_document):
        document = make_document(alice)
        assert not allows(None, DocumentAction.VIEW, document)

    def test_authorize_raises(self, alice, carol, make_document):
        document = make_document(alice)

        authorize(alice, DocumentAction.DELETE, document)
        with pytest.raises(AuthorizationError):
            authorize(carol, DocumentAction.DELETE, document)
