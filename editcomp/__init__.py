import pluggy

hookimpl = pluggy.HookimplMarker("editcomp")
