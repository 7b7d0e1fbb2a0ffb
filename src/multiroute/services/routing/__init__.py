"""Route lookup across providers: adapters, codec, errors and orchestration."""
