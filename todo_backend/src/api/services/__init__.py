"""Store-agnostic operations invoked by the routers."""
