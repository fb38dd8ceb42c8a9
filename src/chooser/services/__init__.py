"""Selection controller, search helpers and page coordinator."""
