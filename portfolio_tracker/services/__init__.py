"""Domain services: price resolution, position math, and datastore access."""
