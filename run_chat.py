# run_chat.py
"""
Plain chat with the model, no aircraft involved.

    OPENAI_API_KEY=sk-... python run_chat.py
"""
import argparse
import logging
import os

from dronegpt.chat import ChatSession, ModelClient, ModelClientError
from dronegpt.constants.model_api import ModelAPIConstants


def main():
    parser = argparse.ArgumentParser(description="Chat with the model from the command line")
    parser.add_argument("--model", default=ModelAPIConstants.DEFAULT_CHAT_MODEL, help="Model identifier")
    parser.add_argument("--url", default=ModelAPIConstants.DEFAULT_URL, help="Chat completion endpoint")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(levelname)s - %(message)s')

    client = ModelClient(os.environ.get(ModelAPIConstants.API_KEY_ENV), url=args.url)
    chat = ChatSession(client, model=args.model)

    print("Empty line to quit.")
    while True:
        try:
            text = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            text = ""
        if not text:
            print("Goodbye")
            break
        try:
            reply = chat.add(text)
        except ModelClientError as e:
            print(f"[error] {e}")
            continue
        print(f"Assistant: {reply.content}")


if __name__ == "__main__":
    main()
