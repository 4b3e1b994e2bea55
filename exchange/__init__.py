"""Medical resource exchange application.

Hospitals publish oxygen, blood and organ inventory, post requests
against each other's inventory and move those requests through the
accept / reject / cancel / finalize lifecycle.
"""
