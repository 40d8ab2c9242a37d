# Place Map Core - topology store, place validation, grid transform, tables
#
# STORE CONTRACT
# ==============
#
# 1. ONE FILE, ONE STORE - TopologyStore owns the TopoJSON file it was built
#    with. Construct it once (server.create_app) and hand it to whoever needs
#    it. There is no module-level instance.
#
# 2. ONLY 'places' IS EDITED - every other collection under 'objects'
#    (counties, states, berlin, ...) is carried through writes untouched.
#
# 3. FRESHNESS IS POLLED - external edits to the file are noticed on the next
#    store call by comparing mtimes. No file locks are taken.
#
# 4. WRITES ARE SERIALIZED - add/delete hold the store lock for the whole
#    read-modify-write-persist sequence, and persist before the cache moves.
