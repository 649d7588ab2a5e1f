# dronegpt/chat/tests/test_conversation.py

import unittest

import pytest

from dronegpt.chat.context import select_context
from dronegpt.chat.conversation import ConversationLog
from dronegpt.chat.data_models import (AssistantMessage, ObservationMessage, SystemMessage,
                                       ToolMessage, UserMessage)
from dronegpt.chat.exceptions import ContextError, ConversationError


def _log_with_command(command="Take off"):
    log = ConversationLog("You are DroneGPT.")
    user = UserMessage(command)
    observation = ObservationMessage('{"altitude": 0.0}')
    log.append(user)
    log.append(observation)
    return log, user, observation


class TestConversationLog(unittest.TestCase):

    def test_system_prompt_first(self):
        log = ConversationLog("prompt")
        self.assertEqual(log.all(), (SystemMessage("prompt"),))
        self.assertEqual(len(log), 1)

    def test_second_system_prompt_rejected(self):
        log = ConversationLog("prompt")
        with self.assertRaises(ConversationError):
            log.append(SystemMessage("another"))
        self.assertEqual(len(log), 1)

    def test_append_preserves_order(self):
        log, user, observation = _log_with_command()
        reply = AssistantMessage('{"type": "take_off"}')
        log.append(reply)
        self.assertEqual(log.all()[1:], (user, observation, reply))

    def test_all_is_a_read_only_view(self):
        log, _, _ = _log_with_command()
        view = log.all()
        log.append(AssistantMessage("ok"))
        self.assertEqual(len(view), 3)

    def test_visible_hides_internal_turns(self):
        log, user, _ = _log_with_command()
        reply = AssistantMessage("Ok, I'm taking off! {\"type\": \"take_off\"}")
        log.append(reply)
        log.append(AssistantMessage('{"type": "stop"}', control=True))
        log.append(ToolMessage("done", tool_call_id="call_1"))
        log.append(ObservationMessage("{}"))

        self.assertEqual(log.visible(), [user, reply])

    def test_subscribers_receive_appends(self):
        log = ConversationLog("prompt")
        channel = log.subscribe()
        user = UserMessage("Land")
        log.append(user)

        self.assertIs(channel.get_nowait(), user)

        log.unsubscribe(channel)
        log.append(ObservationMessage("{}"))
        self.assertTrue(channel.empty())


class TestSelectContext(unittest.TestCase):

    def test_command_and_anchor_only(self):
        log, user, observation = _log_with_command()
        selected = select_context(log.all())
        self.assertEqual(len(selected), 3)
        self.assertEqual(selected, [log.system_prompt, user, observation])

    def test_plan_and_latest_observation_added(self):
        log, user, observation_1 = _log_with_command()
        assistant = AssistantMessage('{"type": "take_off"}')
        observation_2 = ObservationMessage('{"altitude": 1.2}')
        log.append(assistant)
        log.append(observation_2)

        selected = select_context(log.all())
        self.assertEqual(len(selected), 5)
        self.assertEqual(selected, [log.system_prompt, user, observation_1, assistant, observation_2])

    def test_size_is_bounded(self):
        log, user, observation_1 = _log_with_command()
        plan = AssistantMessage("plan")
        log.append(plan)
        for step in range(50):
            log.append(ObservationMessage(f'{{"step": {step}}}'))
            log.append(AssistantMessage(f"step {step}"))
        latest = ObservationMessage('{"step": "last"}')
        log.append(latest)

        selected = select_context(log.all())
        self.assertEqual(selected, [log.system_prompt, user, observation_1, plan, latest])

    def test_anchor_follows_most_recent_command(self):
        log, _, _ = _log_with_command("Take off")
        log.append(AssistantMessage("taking off"))
        second_user = UserMessage("Land")
        second_anchor = ObservationMessage('{"altitude": 1.2}')
        log.append(second_user)
        log.append(second_anchor)

        self.assertEqual(select_context(log.all())[1:], [second_user, second_anchor])

    def test_control_turns_are_not_the_plan(self):
        log, user, observation_1 = _log_with_command()
        log.append(AssistantMessage('{"type": "stop"}', control=True))
        observation_2 = ObservationMessage("{}")
        log.append(observation_2)
        plan = AssistantMessage("real plan")
        log.append(plan)
        observation_3 = ObservationMessage("{}")
        log.append(observation_3)

        self.assertEqual(select_context(log.all()), [log.system_prompt, user, observation_1, plan, observation_3])

    def test_no_plan_yet(self):
        log, user, observation_1 = _log_with_command()
        log.append(AssistantMessage('{"type": "stop"}', control=True))
        observation_2 = ObservationMessage("{}")
        log.append(observation_2)

        self.assertEqual(select_context(log.all()), [log.system_prompt, user, observation_1, observation_2])


def test_no_user_message_fails_fast():
    log = ConversationLog("prompt")
    with pytest.raises(ContextError):
        select_context(log.all())


def test_missing_anchor_fails_fast():
    log = ConversationLog("prompt")
    log.append(UserMessage("Take off"))
    with pytest.raises(ContextError):
        select_context(log.all())


def test_missing_system_prompt_fails_fast():
    with pytest.raises(ContextError):
        select_context([UserMessage("hi"), ObservationMessage("{}")])


if __name__ == '__main__':
    unittest.main()
