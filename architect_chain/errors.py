"""Exception hierarchy shared by the blockchain components."""


class BlockchainError(Exception):
    """Base class for every error the blockchain raises."""


class InvalidBlockError(BlockchainError):
    """A block, or the data used to build one, breaks a consensus rule."""


class TransactionError(BlockchainError):
    """A transaction or fee value is not acceptable."""


class ConfigError(BlockchainError):
    """A configuration value is missing or out of range."""