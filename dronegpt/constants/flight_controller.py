"""dronegpt/constants/flight_controller.py"""

# Virtual stick travel, matching the physical remote controller.
STICK_MIN = -660
STICK_MAX = 660


class FCKeys:
    #--------------------------
    # FLIGHT CONTROLLER STATE
    #--------------------------
    class FLIGHT:
        # {"longitude", "latitude", "altitude"} in degrees/degrees/meters
        LOCATION_3D = "FlightController.AircraftLocation3D"
        # {"x", "y", "z"} in m/s, NED frame
        VELOCITY = "FlightController.AircraftVelocity"
        # North is 0, east is 90. Range [-180, 180]
        COMPASS_HEADING = "FlightController.CompassHeading"
        # {"longitude", "latitude"}
        HOME_LOCATION = "FlightController.HomeLocation"

    #--------------------------
    # ACTIONS
    #--------------------------
    class ACTIONS:
        START_TAKEOFF = "FlightController.StartTakeoff"
        START_AUTO_LANDING = "FlightController.StartAutoLanding"

    #--------------------------
    # VIRTUAL STICKS
    #--------------------------
    class STICKS:
        # {"verticalPosition", "horizontalPosition"}
        LEFT = "VirtualStick.LeftStick"
        RIGHT = "VirtualStick.RightStick"
