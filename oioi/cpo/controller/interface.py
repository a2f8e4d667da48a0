"""
This module contains the abstract class the CPO server hands validated
session-start and session-stop requests to. Implementations talk to the
charging stations (or to the backend that controls them); that part is not
within this package.
"""
from abc import ABC, abstractmethod
from typing import Optional

from oioi.shared.messages.datatypes import User
from oioi.shared.messages.enums import ChargeOutcome
from oioi.shared.messages.identifiers import ConnectorId, PaymentReference, SessionId


class ChargingHandlerInterface(ABC):
    @property
    def name(self) -> str:
        """Used in log messages and error notifications"""
        return type(self).__name__

    @abstractmethod
    async def start(
        self,
        user: User,
        connector_id: ConnectorId,
        payment_reference: Optional[PaymentReference] = None,
    ) -> ChargeOutcome:
        """
        Remotely starts a charging session for the user at the given
        connector.

        Returns ChargeOutcome.UNSPECIFIED if the connector is none of this
        handler's business, so that another registered handler can answer.
        """
        raise NotImplementedError

    @abstractmethod
    async def stop(
        self, user: User, connector_id: ConnectorId, session_id: SessionId
    ) -> ChargeOutcome:
        """
        Remotely stops the charging session with the given ID.

        Returns ChargeOutcome.UNSPECIFIED if the connector is none of this
        handler's business.
        """
        raise NotImplementedError
