"""TechGear UK support chatbot — answers customer questions via LLM tool calling.

Architecture Overview
=====================

Each customer question is answered by a short, bounded exchange with an
Azure OpenAI chat deployment:

1. The question and a fixed system instruction are sent with two tools
   advertised: ``search_knowledge_base`` (company information) and
   ``query_inventory`` (stock and prices).
2. If the model asks for tool calls, each one is executed locally and its
   result appended to the transcript.
3. A second call, with no tools advertised, produces the final answer.

Anything neither tool covers gets a fixed fallback message.  Any transport
or protocol failure gets a fixed apology; the process keeps serving.

Key Design Decisions
--------------------
- **State machine**: a LangGraph StateGraph, compiled without a checkpointer
  because transcripts live for exactly one question.
- **Remote call**: ``AzureChatOpenAI`` behind one ``complete`` method,
  so tests substitute a scripted fake.
- **Knowledge base**: the text is tiny, so the whole file is returned and the
  model extracts the answer.
- **Inventory**: a seed-once SQLite table shared by every query.
- **Dual Interface**: FastAPI server + CLI chat loop.

Package Structure
-----------------
- ``techgear_chatbot/router.py`` — LangGraph state machine and ``route``
- ``techgear_chatbot/config.py`` — configuration from the environment
- ``techgear_chatbot/prompts.py`` — system instruction and fixed replies
- ``techgear_chatbot/server.py`` — FastAPI application
- ``techgear_chatbot/main.py`` — CLI chat interface
- ``techgear_chatbot/services/`` — Azure OpenAI client, metrics
- ``techgear_chatbot/tools/`` — tool catalogue, knowledge base, inventory
- ``techgear_chatbot/api/`` — FastAPI routes and Pydantic schemas
"""
