# dronegpt/agent/core.py
"""
Closed-loop control agent.

One AgentRun per operator command. Each round:

    OBSERVING        snapshot telemetry + camera, append an observation
    AWAITING_MODEL   send the reduced context to the model
    EXECUTING        parse the reply and apply the instruction
    PACED_WAIT       sleep out the rest of the loop period

until the model stops answering with an instruction, something fails, or the
run is cancelled. Every way out applies one final Stop.
"""
import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

from .config import AgentConfig
from .exceptions import AgentBusyError
from .prompt import TRANSIENT_FAILURE_MESSAGE
from ..chat.client import ModelClient
from ..chat.context import select_context
from ..chat.conversation import ConversationLog
from ..chat.data_models import (AssistantMessage, CompletionRequest, ConversationMessage,
                                ObservationMessage, UserMessage)
from ..chat.exceptions import ChatError, ModelProtocolError, ModelTransientError
from ..flight.actuator import FlightActuator
from ..flight.exceptions import FlightError
from ..flight.instructions import Instruction, Stop, instruction_to_json, parse_instruction
from ..telemetry.core import TelemetryStore
from ..telemetry.data_models import AircraftState
from ..vision.core import VisionFeed
from ..vision.encoding import to_data_url

logger = logging.getLogger(__name__)


class AgentState(Enum):
    IDLE = "idle"
    OBSERVING = "observing"
    AWAITING_MODEL = "awaiting_model"
    EXECUTING = "executing"
    PACED_WAIT = "paced_wait"
    STOPPED = "stopped"


class RunOutcome(Enum):
    COMPLETED = "completed"   # the model had nothing more to do
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class LoopStats:
    iterations: int = 0
    transient_failures: int = 0
    overruns: int = 0
    last_overrun_s: float = 0.0


def pace_delay(elapsed_s: float, period_s: float) -> Tuple[float, float]:
    """
    Splits the remainder of a loop period.

    Returns:
        (sleep_s, overrun_s): time left to sleep, and how far past the period
        the round ran. At most one of them is non-zero.
    """
    residual = period_s - elapsed_s
    if residual > 0:
        return residual, 0.0
    return 0.0, -residual


class AgentRun:
    """
    The background loop serving one operator command.

    Control of the aircraft is released exactly once: either by ``cancel``
    or when the loop exits. After that no instruction reaches the actuator,
    even if a model reply is still on its way.
    """

    def __init__(self, agent: "Agent", command: str):
        self.agent = agent
        self.command = command
        self.stats = LoopStats()
        self.state = AgentState.IDLE
        self.outcome: Optional[RunOutcome] = None
        self.error: Optional[BaseException] = None

        self._cancelled = threading.Event()
        self._finished = threading.Event()
        self._control_lock = threading.Lock()
        self._released = False
        self._thread = threading.Thread(target=self._run, name="dronegpt-agent", daemon=True)

    # --- Public API ---

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        """Neutralises the sticks now and ends the loop at its next check."""
        if self._cancelled.is_set():
            return
        logger.info(f"Cancelling run: {self.command!r}")
        self._cancelled.set()
        self._release_control()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """True once the loop thread has fully finished."""
        return self._finished.wait(timeout)

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    # --- Loop ---

    def _run(self):
        outcome = RunOutcome.FAILED
        logger.info(f"Running command: {self.command!r}")
        try:
            outcome = self._loop()
        except (ChatError, FlightError) as e:
            self.error = e
            logger.error(f"Run failed: {type(e).__name__}: {e}")
        except Exception as e:
            self.error = e
            logger.error(f"Unexpected error in agent loop: {e}", exc_info=True)
        finally:
            if self._cancelled.is_set():
                outcome = RunOutcome.CANCELLED
            self._release_control()
            self.outcome = outcome
            self._set_state(AgentState.STOPPED)
            logger.info(f"Run ended ({outcome.value}) after {self.stats.iterations} iteration(s)")
            self._finished.set()

    def _loop(self) -> RunOutcome:
        agent = self.agent
        config = agent.config

        while not self._cancelled.is_set():
            started = agent.clock()

            self._set_state(AgentState.OBSERVING)
            state = agent.telemetry.snapshot()
            agent.conversation.append(agent.observe(state))
            request = CompletionRequest(config.model, select_context(agent.conversation.all()), config.max_tokens)

            self._set_state(AgentState.AWAITING_MODEL)
            try:
                response = agent.client.complete(request)
            except ModelTransientError as e:
                if self._cancelled.is_set():
                    break
                self.stats.transient_failures += 1
                logger.warning(f"Model unavailable ({e}), stopping the aircraft for this round.")
                self._set_state(AgentState.EXECUTING)
                stop = Stop(TRANSIENT_FAILURE_MESSAGE)
                if not self._execute(stop, state):
                    break
                agent.conversation.append(AssistantMessage(instruction_to_json(stop), control=True))
            else:
                if self._cancelled.is_set():
                    logger.debug("Reply arrived after cancellation, discarded.")
                    break
                reply = response.message
                logger.info(f"Model reply: {reply}")
                if not isinstance(reply, AssistantMessage):
                    raise ModelProtocolError(f"Expected an assistant reply, got role {reply.role!r}")
                agent.conversation.append(reply)

                self._set_state(AgentState.EXECUTING)
                instruction = parse_instruction(reply.content)
                if instruction is None:
                    logger.info("No instruction in reply, command finished.")
                    return RunOutcome.COMPLETED
                if isinstance(instruction, Stop):
                    logger.info(f"Model stopped: {instruction.message or 'no message'}")
                    return RunOutcome.COMPLETED
                if not self._execute(instruction, state):
                    break

            self.stats.iterations += 1
            elapsed = agent.clock() - started
            sleep_s, overrun_s = pace_delay(elapsed, config.loop_period_s)
            logger.debug(f"Round took {elapsed:.3f}s")
            if overrun_s > 0:
                self.stats.overruns += 1
                self.stats.last_overrun_s = overrun_s
                logger.warning(f"Loop took {overrun_s:.3f}s longer than expected")

            self._set_state(AgentState.PACED_WAIT)
            if sleep_s > 0 and self._sleep(sleep_s):
                break

        return RunOutcome.CANCELLED

    def _sleep(self, seconds: float) -> bool:
        """Returns True if woken by cancellation."""
        return self._cancelled.wait(seconds)

    def _execute(self, instruction: Instruction, state: AircraftState) -> bool:
        with self._control_lock:
            if self._released:
                logger.info(f"Control already released, not executing {instruction}")
                return False
            self.agent.actuator.execute(instruction, state)
            return True

    def _release_control(self):
        with self._control_lock:
            if self._released:
                return
            self._released = True
            try:
                self.agent.actuator.execute(Stop())
            except Exception as e:
                logger.error(f"Final stop failed: {e}", exc_info=True)

    def _set_state(self, state: AgentState):
        logger.debug(f"{self.state.value} -> {state.value}")
        self.state = state


class Agent:
    """
    Drives the aircraft from operator commands.

    All collaborators are injected; ``from_connection`` wires the usual set
    from a flight-controller connection.
    """

    def __init__(self, config: AgentConfig, telemetry: TelemetryStore, vision: VisionFeed,
                 client: ModelClient, actuator: FlightActuator,
                 conversation: Optional[ConversationLog] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.telemetry = telemetry
        self.vision = vision
        self.client = client
        self.actuator = actuator
        self.conversation = conversation or ConversationLog(config.system_prompt)
        self.clock = clock
        self._lock = threading.Lock()
        self._current: Optional[AgentRun] = None

    @classmethod
    def from_connection(cls, config: AgentConfig, fc, camera_stream=None) -> "Agent":
        telemetry = TelemetryStore()
        telemetry.attach(fc)
        vision = VisionFeed(config.jpeg_quality)
        if camera_stream is not None:
            vision.attach(camera_stream)
        client = ModelClient(config.api_key, url=config.api_url, timeout=config.request_timeout_s)
        actuator = FlightActuator(fc, telemetry, action_timeout_s=config.action_timeout_s)
        return cls(config, telemetry, vision, client, actuator)

    @property
    def state(self) -> AgentState:
        current = self._current
        return current.state if current else AgentState.IDLE

    @property
    def current_run(self) -> Optional[AgentRun]:
        return self._current

    def run(self, command: str) -> AgentRun:
        """
        Appends the command and starts a background run for it.

        Raises:
            AgentBusyError: if the previous run has not finished.
        """
        with self._lock:
            if self._current is not None and not self._current.finished:
                raise AgentBusyError("A command is already running, cancel it first")
            self.conversation.append(UserMessage(command))
            run = AgentRun(self, command)
            self._current = run
        run.start()
        return run

    def cancel(self) -> bool:
        """Cancels the active run. False if there was none."""
        current = self._current
        if current is None or current.finished:
            return False
        current.cancel()
        return True

    def observe(self, state: AircraftState) -> ObservationMessage:
        image = self.vision.snapshot()
        return ObservationMessage(
            state.to_json(),
            image_url=to_data_url(image) if image is not None else None,
            image_detail=self.config.image_detail,
        )

    def visible_messages(self) -> List[ConversationMessage]:
        return self.conversation.visible()
