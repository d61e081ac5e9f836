# Data dictionary for the flow controller sample.

# Calibration parameters
Threshold = Parameter(192, data_type="int32", unit="counts",
                      description="Sensor level that opens the valve")
Hysteresis = Parameter(8, data_type="uint8", unit="counts")
Gain = Parameter(0.75, data_type="single")
ValveEnabled = Parameter(True, data_type="boolean")
Timeout = Parameter(250)  # Inferred, derived from the value

# Board support owns these
SensorLevel = Signal(data_type="uint16", storage_class="ImportedExternPointer",
                     identifier="bsp_sensor_level")
ValveCommand = Signal(data_type="boolean", storage_class="ExportedGlobal")

# Internal
FilteredLevel = Signal(data_type="single")

_scratch = 3  # private helpers are not symbols
