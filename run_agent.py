# run_agent.py
"""
Operator console: fly a simulated aircraft with natural-language commands.

    OPENAI_API_KEY=sk-... python run_agent.py --lat 47.3769 --lon 8.5417

Type a command and press enter. A new command cancels the one still
running; "/cancel" only cancels; an empty line quits.
"""
import argparse
import logging
import queue
import threading

from dronegpt.agent import Agent, AgentConfig
from dronegpt.chat.data_models import AssistantMessage
from dronegpt.fc_interface import FCConnection, SimulatedProtocol

logger = logging.getLogger(__name__)


def _print_transcript(channel: queue.Queue, done: threading.Event):
    while not done.is_set():
        try:
            message = channel.get(timeout=0.2)
        except queue.Empty:
            continue
        if isinstance(message, AssistantMessage) and not message.control:
            print(f"\nDroneGPT: {message.content}\n> ", end="", flush=True)


def _simulate(protocol: SimulatedProtocol, rate_hz: float, done: threading.Event):
    dt = 1.0 / rate_hz
    while not done.wait(dt):
        protocol.step(dt)


def main():
    parser = argparse.ArgumentParser(description="DroneGPT operator console (simulated aircraft)")
    parser.add_argument("--lat", type=float, default=47.3769, help="Start latitude (deg)")
    parser.add_argument("--lon", type=float, default=8.5417, help="Start longitude (deg)")
    parser.add_argument("--heading", type=float, default=0.0, help="Start compass heading (deg)")
    parser.add_argument("--period", type=float, default=None, help="Control loop period (s)")
    parser.add_argument("--model", default=None, help="Model identifier")
    parser.add_argument("--sim-rate", type=float, default=10.0, help="Simulator update rate (Hz)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    config = AgentConfig.from_env()
    if args.period is not None:
        config.loop_period_s = args.period
    if args.model:
        config.model = args.model
    if not config.api_key:
        logger.warning("OPENAI_API_KEY is not set, every model request will be rejected.")

    protocol = SimulatedProtocol(longitude=args.lon, latitude=args.lat, heading=args.heading)
    fc = FCConnection(protocol)
    agent = Agent.from_connection(config, fc)

    done = threading.Event()
    channel = agent.conversation.subscribe()
    threading.Thread(target=_print_transcript, args=(channel, done), daemon=True).start()
    threading.Thread(target=_simulate, args=(protocol, args.sim_rate, done), daemon=True).start()

    print("--- DroneGPT console ---")
    print("Commands are sent to the model; '/cancel' stops the current one, an empty line quits.")
    try:
        while True:
            command = input("> ").strip()
            if not command:
                break
            if agent.cancel():
                agent.current_run.wait()
            if command == "/cancel":
                continue
            agent.run(command)
    except (EOFError, KeyboardInterrupt):
        print()
    finally:
        if agent.cancel():
            agent.current_run.wait(timeout=config.request_timeout_s)
        done.set()
        agent.conversation.unsubscribe(channel)
        fc.disconnect()
        print("Goodbye")


if __name__ == "__main__":
    main()
