"""Sheet bridge: submit a search to the job proxy, poll it, write the result."""
