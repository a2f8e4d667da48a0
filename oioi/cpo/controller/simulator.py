"""
This module contains an in-memory charging handler, used for local runs of
the CPO server and for tests.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from oioi.cpo.controller.interface import ChargingHandlerInterface
from oioi.shared.messages.datatypes import User
from oioi.shared.messages.enums import ChargeOutcome, ConnectorStatusType
from oioi.shared.messages.identifiers import (
    ConnectorId,
    OperatorId,
    PaymentReference,
    SessionId,
)

logger = logging.getLogger(__name__)


@dataclass
class SimSession:
    session_id: SessionId
    user: User
    connector_id: ConnectorId
    payment_reference: Optional[PaymentReference] = None


class SimChargingHandler(ChargingHandlerInterface):
    """
    A simulated charging backend that knows a set of connectors per operator
    and keeps track of the sessions started on them.
    """

    def __init__(
        self,
        connectors: Optional[Dict[ConnectorId, ConnectorStatusType]] = None,
        operators: Optional[Iterable[OperatorId]] = None,
    ):
        self.connectors: Dict[ConnectorId, ConnectorStatusType] = dict(
            connectors or {}
        )
        self.operators = set(operators or ())
        self.operators.update(connector.operator_id for connector in self.connectors)
        self.sessions: Dict[SessionId, SimSession] = {}

    def add_connector(
        self,
        connector_id: ConnectorId,
        status: ConnectorStatusType = ConnectorStatusType.AVAILABLE,
    ) -> None:
        self.connectors[connector_id] = status
        self.operators.add(connector_id.operator_id)

    def set_status(self, connector_id: ConnectorId, status: ConnectorStatusType):
        if connector_id not in self.connectors:
            raise KeyError(f"Unknown connector {connector_id}")
        self.connectors[connector_id] = status

    def session_at(self, connector_id: ConnectorId) -> Optional[SimSession]:
        for session in self.sessions.values():
            if session.connector_id == connector_id:
                return session
        return None

    def _check_connector(self, connector_id: ConnectorId) -> Optional[ChargeOutcome]:
        if connector_id.operator_id not in self.operators:
            return ChargeOutcome.UNKNOWN_OPERATOR
        if connector_id not in self.connectors:
            return ChargeOutcome.UNKNOWN_EVSE
        return None

    async def start(
        self,
        user: User,
        connector_id: ConnectorId,
        payment_reference: Optional[PaymentReference] = None,
    ) -> ChargeOutcome:
        """Overrides ChargingHandlerInterface.start()."""
        failure = self._check_connector(connector_id)
        if failure:
            logger.debug(f"Start at {connector_id} rejected: {failure.value}")
            return failure

        status = self.connectors[connector_id]
        if status in (ConnectorStatusType.OCCUPIED, ConnectorStatusType.RESERVED):
            return ChargeOutcome.ALREADY_IN_USE
        if status != ConnectorStatusType.AVAILABLE:
            return ChargeOutcome.EVSE_ERROR

        session = SimSession(
            session_id=SessionId.parse(uuid.uuid4().hex),
            user=user,
            connector_id=connector_id,
            payment_reference=payment_reference,
        )
        self.sessions[session.session_id] = session
        self.connectors[connector_id] = ConnectorStatusType.OCCUPIED
        logger.info(f"Started session {session.session_id} at {connector_id}")
        return ChargeOutcome.STARTED

    async def stop(
        self, user: User, connector_id: ConnectorId, session_id: SessionId
    ) -> ChargeOutcome:
        """Overrides ChargingHandlerInterface.stop()."""
        failure = self._check_connector(connector_id)
        if failure:
            logger.debug(f"Stop at {connector_id} rejected: {failure.value}")
            return failure

        session = self.sessions.get(session_id)
        if session is None or session.connector_id != connector_id:
            logger.warning(f"No session {session_id} at {connector_id}")
            return ChargeOutcome.EVSE_ERROR

        del self.sessions[session_id]
        self.connectors[connector_id] = ConnectorStatusType.AVAILABLE
        logger.info(f"Stopped session {session_id} at {connector_id}")
        return ChargeOutcome.SUCCESS
