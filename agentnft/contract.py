"""
Interface to the deployed AgentNFT contract.

The SDK does not ship a chain client. Applications wrap their own binding
(web3, a relayer, a test double) in an ``AgentNFTContract`` and hand it to
the registry. Write calls block until the transaction is confirmed and
return its receipt with decoded logs.
"""

from abc import ABC, abstractmethod

from agentnft.types.tokens import TxReceipt


class AgentNFTContract(ABC):
    """Abstract AgentNFT contract binding."""

    #: Address transactions are sent from; the default mint recipient
    account: str

    @abstractmethod
    async def mint(self, proofs: list[str], descriptions: list[str], recipient: str) -> TxReceipt:
        """Mint a token carrying one data item per proof."""
        pass

    @abstractmethod
    async def transfer(self, to: str, token_id: int, proofs: list[str]) -> TxReceipt:
        """Move a token to ``to`` with one 144-byte proof per data item."""
        pass

    @abstractmethod
    async def clone(self, to: str, token_id: int, proofs: list[str]) -> TxReceipt:
        """Create a new token for ``to`` holding re-keyed copies of the data."""
        pass

    @abstractmethod
    async def update(self, token_id: int, proofs: list[str]) -> TxReceipt:
        """Replace the data hashes of a token."""
        pass

    @abstractmethod
    async def authorize_usage(self, token_id: int, user: str) -> TxReceipt:
        """Grant ``user`` usage rights on a token."""
        pass

    @abstractmethod
    async def owner_of(self, token_id: int) -> str:
        pass

    @abstractmethod
    async def data_hashes_of(self, token_id: int) -> list[str]:
        pass

    @abstractmethod
    async def data_descriptions_of(self, token_id: int) -> list[str]:
        pass

    @abstractmethod
    async def authorized_users_of(self, token_id: int) -> list[str]:
        pass
