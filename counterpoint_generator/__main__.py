"""Entry point wrapper for ``python -m counterpoint_generator``.

Execution is forwarded to :func:`counterpoint_generator.main` so running the
package as a module and running the installed ``counterpoint-generator``
console script behave identically.

Example
-------
The following invocation writes an eight-note counterpoint in G major::

    python -m counterpoint_generator --key G --measures 2 --bpm 80 \
        --output song.mid
"""

from . import main

if __name__ == "__main__":
    main()
