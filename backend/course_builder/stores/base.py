from typing import Optional


class ContentStore:
    """
    Key/value metadata attached to host documents.

    Every stored value carries a revision that starts at 1 and grows by
    one per write; an absent value has revision 0.
    """

    def get_meta(self, document_id: str, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_meta(
        self,
        document_id: str,
        key: str,
        value: str,
        expected_revision: Optional[int] = None,
    ) -> int:
        """
        Replace the value in full and return its new revision. With
        `expected_revision`, raise RevisionConflict and write nothing
        unless it matches the stored revision.
        """
        raise NotImplementedError

    def delete_meta(self, document_id: str, key: str) -> None:
        raise NotImplementedError

    def get_revision(self, document_id: str, key: str) -> int:
        raise NotImplementedError
