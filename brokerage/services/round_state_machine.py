from datetime import datetime, timezone
from transitions import MachineError
from transitions.extensions.asyncio import AsyncMachine
from brokerage.core.errors import ValidationError
from brokerage.models.rounds import LotRound
from brokerage.core.logging_config import logger

TRIGGER_BY_STATUS = {
    "live": "go_live",
    "closed": "close",
    "draft": "back_to_draft",
}

class RoundStateMachine:
    states = ["draft", "live", "closed"]

    def __init__(self, lot_round: LotRound):
        self.lot_round = lot_round
        self.machine = AsyncMachine(
            model=self,
            states=RoundStateMachine.states,
            initial=lot_round.status or "draft",
            queued=True,
            send_event=True
        )

        self.machine.add_transition("go_live", ["draft", "closed"], "live")
        self.machine.add_transition("close", ["draft", "live"], "closed")
        self.machine.add_transition("back_to_draft", ["live", "closed"], "draft")

    async def move_to(self, status: str) -> bool:
        """Переводит раунд в статус; False, если он уже в нём."""
        if status == self.state:
            return False
        trigger = TRIGGER_BY_STATUS.get(status)
        if trigger is None:
            raise ValidationError(f"Unknown round status: {status}", field="status")
        try:
            await self.trigger(trigger)
        except MachineError as e:
            raise ValidationError(f"Round {self.lot_round.id} cannot move to {status}: {e.value}", field="status")
        return True

    async def on_enter_draft(self, event):
        self.lot_round.status = "draft"
        self.lot_round.closed_at = None
        logger.info(f"Round {self.lot_round.id} of lot {self.lot_round.lot_id} entered state draft")

    async def on_enter_live(self, event):
        self.lot_round.status = "live"
        self.lot_round.closed_at = None
        logger.info(f"Round {self.lot_round.id} of lot {self.lot_round.lot_id} entered state live")

    async def on_enter_closed(self, event):
        self.lot_round.status = "closed"
        self.lot_round.closed_at = datetime.now(timezone.utc)
        logger.info(f"Round {self.lot_round.id} of lot {self.lot_round.lot_id} entered state closed")
