"""Error taxonomy shared by the photo store and its collaborators"""


class PhotoStoreError(Exception):
    """Base exception for photo store errors"""
    pass


class FormatError(PhotoStoreError):
    """Upstream document shape is neither a feature collection nor a document list"""
    pass


class TransportError(PhotoStoreError):
    """Bulk document source or override store unreachable"""
    pass


class AuthError(PhotoStoreError):
    """No resolvable identity for the acting user"""

    def __init__(self, message: str = "User not authenticated"):
        super().__init__(message)


class PhotoNotFoundError(PhotoStoreError):
    """Photo id is not part of the loaded snapshot"""

    def __init__(self, photo_id: str):
        self.photo_id = photo_id
        super().__init__(f"Photo {photo_id} not found")


class MutationInProgressError(PhotoStoreError):
    """A priority mutation for this photo is already in flight"""

    def __init__(self, photo_id: str):
        self.photo_id = photo_id
        super().__init__(f"A priority update for photo {photo_id} is already in progress")
