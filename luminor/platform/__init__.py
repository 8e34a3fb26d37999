"""Platform services: clock, event bus and store, sessions, auth, flash, logging, Ollama client, agent workloads."""