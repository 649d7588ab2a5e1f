# dronegpt/agent/tests/test_agent_loop.py

import json
import threading
import unittest
from unittest.mock import MagicMock, patch

import pytest

from dronegpt.agent.config import AgentConfig
from dronegpt.agent.core import Agent, AgentRun, AgentState, RunOutcome, pace_delay
from dronegpt.agent.exceptions import AgentBusyError
from dronegpt.chat.data_models import (AssistantMessage, CompletionResponse, Choice, ObservationMessage,
                                       UserMessage)
from dronegpt.chat.exceptions import ModelProtocolError, ModelTransientError
from dronegpt.flight.exceptions import InstructionDecodeError, UnrecognizedInstructionError
from dronegpt.flight.instructions import Control, Stop, TakeOff
from dronegpt.telemetry.core import TelemetryStore
from dronegpt.telemetry.data_models import StickPosition
from dronegpt.vision.core import VisionFeed

WAIT_S = 5.0


def _reply(content):
    return CompletionResponse([Choice(AssistantMessage(content), "stop")])


class AgentTestCase(unittest.TestCase):

    def setUp(self):
        self.config = AgentConfig(api_key="sk-test", model="gpt-test", loop_period_s=0.0)
        self.telemetry = TelemetryStore()
        self.telemetry.update(longitude=8.54, latitude=47.37, altitude=0.0, compass_heading=0.0)
        self.vision = VisionFeed()
        self.client = MagicMock()
        self.actuator = MagicMock()
        self.agent = Agent(self.config, self.telemetry, self.vision, self.client, self.actuator,
                           clock=lambda: 0.0)

    def run_to_end(self, command):
        run = self.agent.run(command)
        self.assertTrue(run.wait(WAIT_S), "agent run did not finish")
        return run

    def executed(self):
        return [c[0][0] for c in self.actuator.execute.call_args_list]

    def sent_requests(self):
        return [c[0][0] for c in self.client.complete.call_args_list]


class TestAgentLoop(AgentTestCase):

    def test_take_off_end_to_end(self):
        self.client.complete.side_effect = [
            _reply('{"type":"take_off","message":"Ok"}'),
            _reply("I'm hovering at 1.2m."),
        ]

        run = self.run_to_end("Take off")

        self.assertEqual(run.outcome, RunOutcome.COMPLETED)
        self.assertEqual(self.executed(), [TakeOff("Ok"), Stop()])

        first_request = self.sent_requests()[0]
        self.assertEqual(len(first_request.messages), 3)
        self.assertEqual(first_request.messages[1], UserMessage("Take off"))
        self.assertIsInstance(first_request.messages[2], ObservationMessage)

        # Home comes from the snapshot taken in the same iteration
        home_state = self.actuator.execute.call_args_list[0][0][1]
        self.assertEqual((home_state.longitude, home_state.latitude), (8.54, 47.37))
        observed = json.loads(first_request.messages[2].state)
        self.assertEqual((observed["longitude"], observed["latitude"]), (8.54, 47.37))

    def test_reduced_context_is_transmitted(self):
        self.client.complete.side_effect = [
            _reply('{"type":"take_off"}'),
            _reply('{"type":"control","leftStick":{"horizontalPosition":0,"verticalPosition":100},'
                   '"rightStick":{"horizontalPosition":0,"verticalPosition":0}}'),
            _reply("Done."),
        ]

        self.run_to_end("Take off and climb")

        requests_sent = self.sent_requests()
        self.assertEqual([len(r.messages) for r in requests_sent], [3, 5, 5])
        self.assertGreater(len(self.agent.conversation), 5)
        last = requests_sent[2].messages
        self.assertEqual(last[3], AssistantMessage('{"type":"take_off"}'))
        self.assertIs(last[4], self.agent.conversation.all()[-2])
        self.assertIn(Control(StickPosition(100, 0), StickPosition(0, 0)), self.executed())

    def test_no_instruction_stops_once(self):
        self.client.complete.return_value = _reply("I'm not sure what to do.")

        run = self.run_to_end("Do a barrel roll")

        self.assertEqual(run.outcome, RunOutcome.COMPLETED)
        self.assertEqual(self.executed(), [Stop()])
        self.assertEqual(self.agent.state, AgentState.STOPPED)

    def test_model_stop_completes_run(self):
        self.client.complete.return_value = _reply('{"type": "stop", "message": "Holding"}')

        run = self.run_to_end("Stop")

        self.assertEqual(run.outcome, RunOutcome.COMPLETED)
        self.assertEqual(self.executed(), [Stop()])

    def test_transient_failure_stops_and_continues(self):
        self.client.complete.side_effect = [ModelTransientError("read timed out"), _reply("All done.")]

        run = self.run_to_end("Take off")

        self.assertEqual(run.outcome, RunOutcome.COMPLETED)
        self.assertEqual(run.stats.transient_failures, 1)
        self.assertEqual(len(self.executed()), 2)
        self.assertIsInstance(self.executed()[0], Stop)
        self.assertEqual(self.executed()[1], Stop())

        markers = [m for m in self.agent.conversation.all() if isinstance(m, AssistantMessage) and m.control]
        self.assertEqual(len(markers), 1)
        self.assertEqual(json.loads(markers[0].content)["type"], "stop")
        self.assertNotIn(markers[0], self.agent.visible_messages())
        # The control turn is not taken as the plan
        self.assertEqual(len(self.sent_requests()[1].messages), 4)

    def test_protocol_failure_fails_run(self):
        self.client.complete.side_effect = ModelProtocolError("Malformed completion response")

        run = self.run_to_end("Take off")

        self.assertEqual(run.outcome, RunOutcome.FAILED)
        self.assertIsInstance(run.error, ModelProtocolError)
        self.assertEqual(self.executed(), [Stop()])

    def test_unrecognized_instruction_fails_run(self):
        self.client.complete.return_value = _reply('{"type":"hover"}')

        run = self.run_to_end("Hover")

        self.assertEqual(run.outcome, RunOutcome.FAILED)
        self.assertIsInstance(run.error, UnrecognizedInstructionError)
        self.assertEqual(self.executed(), [Stop()])

    def test_non_assistant_reply_fails_run(self):
        self.client.complete.return_value = CompletionResponse([Choice(UserMessage("echo"))])

        run = self.run_to_end("Take off")

        self.assertEqual(run.outcome, RunOutcome.FAILED)
        self.assertIsInstance(run.error, ModelProtocolError)
        self.assertNotIn(UserMessage("echo"), self.agent.conversation.all())
        self.assertEqual(self.agent.visible_messages(), [UserMessage("Take off")])

    def test_reversed_braces_fail_run(self):
        self.client.complete.return_value = _reply("} not an instruction {")

        run = self.run_to_end("Take off")

        self.assertEqual(run.outcome, RunOutcome.FAILED)
        self.assertIsInstance(run.error, InstructionDecodeError)
        self.assertEqual(self.executed(), [Stop()])

    def test_unexpected_exception_still_stops(self):
        self.client.complete.side_effect = [_reply('{"type":"land"}')]
        self.actuator.execute.side_effect = [RuntimeError("SDK crashed"), None]

        run = self.run_to_end("Land")

        self.assertEqual(run.outcome, RunOutcome.FAILED)
        self.assertIsInstance(run.error, RuntimeError)
        self.assertEqual(self.actuator.execute.call_count, 2)
        self.assertEqual(self.executed()[-1], Stop())

    def test_visible_transcript(self):
        self.client.complete.side_effect = [_reply('Sure! {"type":"land"}'), _reply("Landed.")]

        self.run_to_end("Land")

        self.assertEqual(self.agent.visible_messages(), [
            UserMessage("Land"),
            AssistantMessage('Sure! {"type":"land"}'),
            AssistantMessage("Landed."),
        ])


class TestCancellation(AgentTestCase):

    def setUp(self):
        super().setUp()
        self.request_sent = threading.Event()
        self.release_reply = threading.Event()

        def _slow_complete(request):
            self.request_sent.set()
            self.release_reply.wait(WAIT_S)
            return _reply('{"type":"take_off"}')

        self.client.complete.side_effect = _slow_complete

    def test_cancel_while_awaiting_model(self):
        run = self.agent.run("Take off")
        self.assertTrue(self.request_sent.wait(WAIT_S))
        self.assertEqual(run.state, AgentState.AWAITING_MODEL)

        self.assertTrue(self.agent.cancel())
        self.assertEqual(self.executed(), [Stop()])

        self.release_reply.set()
        self.assertTrue(run.wait(WAIT_S))

        self.assertEqual(run.outcome, RunOutcome.CANCELLED)
        self.assertEqual(self.executed(), [Stop()])
        self.assertNotIn(AssistantMessage('{"type":"take_off"}'), self.agent.conversation.all())

    def test_second_command_while_running(self):
        run = self.agent.run("Take off")
        self.assertTrue(self.request_sent.wait(WAIT_S))

        with self.assertRaises(AgentBusyError):
            self.agent.run("Land")

        run.cancel()
        run.cancel()
        self.release_reply.set()
        self.assertTrue(run.wait(WAIT_S))
        self.assertEqual(self.executed(), [Stop()])
        self.assertFalse(self.agent.cancel())

    def test_new_command_after_cancel(self):
        run = self.agent.run("Take off")
        self.assertTrue(self.request_sent.wait(WAIT_S))
        run.cancel()
        self.release_reply.set()
        self.assertTrue(run.wait(WAIT_S))

        self.client.complete.side_effect = None
        self.client.complete.return_value = _reply("Nothing to do.")
        second = self.agent.run("Land")
        self.assertTrue(second.wait(WAIT_S))
        self.assertEqual(second.outcome, RunOutcome.COMPLETED)


class TestPacing(AgentTestCase):

    def _run_with_clock(self, times):
        self.agent.clock = MagicMock(side_effect=times)
        self.agent.config.loop_period_s = 5.0
        self.client.complete.side_effect = [
            _reply('{"type":"land"}'),
            _reply("Landed."),
        ]
        with patch.object(AgentRun, "_sleep", return_value=False) as sleep:
            run = self.run_to_end("Land")
        return run, sleep

    def test_sleeps_out_the_period(self):
        run, sleep = self._run_with_clock([0.0, 1.2, 10.0])

        sleep.assert_called_once()
        self.assertAlmostEqual(sleep.call_args[0][0], 3.8)
        self.assertEqual(run.stats.overruns, 0)

    def test_overrun_is_recorded_not_raised(self):
        with self.assertLogs("dronegpt.agent.core", level="WARNING"):
            run, sleep = self._run_with_clock([0.0, 6.0, 10.0])

        sleep.assert_not_called()
        self.assertEqual(run.outcome, RunOutcome.COMPLETED)
        self.assertEqual(run.stats.overruns, 1)
        self.assertAlmostEqual(run.stats.last_overrun_s, 1.0)


@pytest.mark.parametrize("elapsed, expected", [
    (1.2, (3.8, 0.0)),
    (6.0, (0.0, 1.0)),
    (5.0, (0.0, 0.0)),
])
def test_pace_delay(elapsed, expected):
    assert pace_delay(elapsed, 5.0) == pytest.approx(expected)


if __name__ == '__main__':
    unittest.main()
