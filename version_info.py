# Version information for PlanTables
VERSION = (0, 3, 0, 0)
VERSION_STRING = "0.3.0"
