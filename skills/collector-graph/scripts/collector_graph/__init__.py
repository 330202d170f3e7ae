"""Graph how HotSpot GC command line options map to the collectors the JVM selects."""
