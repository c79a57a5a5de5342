class ShelterFinderError(Exception):
    """Base class for shelter finder errors"""

class MalformedSourceError(ShelterFinderError):
    """The shelter data document cannot be used for an import"""

class StorageWriteError(ShelterFinderError):
    """A write to the key-value store failed"""

    def __init__(self, key: str, message: str = "Storage write failed"):
        self.key = key
        super().__init__(f"{message}: {key}")
