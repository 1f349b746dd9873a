#!/usr/bin/env python3
"""
Plot the trajectory recorded by the odometry driver.

Usage: plot_odom.py <odom.jsonl>
"""
import sys
import json
import numpy as np
import matplotlib.pyplot as plt

QUALITY_COLORS = {
    "INVALID_FIX": "red",
    "GPS_FIX": "orange",
    "DGPS_FIX": "green",
}

if len(sys.argv) < 2:
    print("Usage: plot_odom.py <odom.jsonl>")
    sys.exit(1)

x_odom = []
y_odom = []
yaw_odom = []
gps_quality = []

# ------------------------------------------
# Read JSON lines written with -o
# ------------------------------------------
with open(sys.argv[1], "r") as f:
    for line in f:
        line = line.strip()
        if not line:
            continue
        record = json.loads(line)
        if record["topic"] == "odom":
            x_odom.append(record["position"][0])
            y_odom.append(record["position"][1])
            yaw_odom.append(record["rpy"][2])
        elif record["topic"] == "gps":
            gps_quality.append(record["quality"])

if not x_odom:
    print("No odometry found in log! Nothing to plot.")
    sys.exit(1)

x_odom = np.array(x_odom)
y_odom = np.array(y_odom)
yaw_odom = np.array(yaw_odom)

# GPS records are published alongside each odometry record
colors = [QUALITY_COLORS.get(q, "gray") for q in gps_quality[:len(x_odom)]]

# ------------------------------------------
# Plot
# ------------------------------------------
plt.figure(figsize=(8, 8))
plt.plot(x_odom, y_odom, 'b-', label="Odometry", linewidth=1)
if colors:
    plt.scatter(x_odom[:len(colors)], y_odom[:len(colors)], s=8, c=colors, alpha=0.7)

# Heading arrows every tenth pose
step = max(1, len(x_odom) // 10)
plt.quiver(x_odom[::step], y_odom[::step],
           np.cos(yaw_odom[::step]), np.sin(yaw_odom[::step]),
           angles='xy', width=0.003, color='k', label="Heading")

plt.xlabel("x, East of origin (m)")
plt.ylabel("y, North of origin (m)")
plt.title("Vehicle Trajectory (local map frame)")
plt.grid(True)
plt.axis('equal')
plt.legend()
plt.tight_layout()
plt.show()


#Sample run command: python3 plot_odom.py odom.jsonl
