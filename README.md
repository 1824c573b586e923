# scanpath

Geometry, file formats and path-refinement steps for a laser line-scanner
that moves over a part. Given what one scanning pass measured, it works out a
new set of sensor poses that face the surface better and keep the sensor at
its working distance.

## Modules

- `scanpath.vector3`: `Vector3`, an immutable double-precision 3D vector
  (`+`, `-`, scaling, component-wise `*`, `/`, `length`, `length_squared`,
  `normalized`, `abs`, `to_tuple`), with `dot_product` and `cross_product`.
- `scanpath.stl`: binary STL meshes. `read_binary_stl` and `parse_binary_stl`
  return `Facet`s and recompute normals left blank in the file
  (`facet_normal`, `unit`); `write_binary_stl` writes them back with a header
  of at most 80 bytes. Malformed data raises `StlFormatError`.
- `scanpath.orientation`: roll/pitch/yaw helpers in degrees
  (`rpy_to_rotation_matrix`, `unit_vector_from_rpy`,
  `perpendicular_vector_from_rpy`, `calculate_displacement`,
  `fix_rpy_orientation`) and `update_pos_from_dif_angle`, which tilts a pose
  towards a surface normal by at most a given angle.
- `scanpath.rawmat`: a binary matrix format, an `IMG_INFO` header followed by
  row-major data. `write_mat_raw(path, "w" | "a", matrix)` and
  `read_mat_raw(path)`; 1-, 3- and 4-channel float, and 1-channel int32,
  uint8 and uint16 matrices are supported. Anything else raises `RawMatError`.
- `scanpath.trajfile`: trajectory XML files (`save_trajectory`,
  `load_trajectory`, returning a `TrajectoryDocument` of `PointTraj` poses and
  the FPS, velocity, FOV, resolution and uncertainty) and plain-text point
  files with one point per line (`read_point_file`).
- `scanpath.density`: neighbour counts in a radius, density normalisation,
  grouping of consecutive profile ids (`group_runs`) and box tests (`in_box`).
- `scanpath.analysis`: `normal_scan_image`, `profiles_in_roi` and
  `analyse_scan`, which gives a `ScanAnalysis` holding mean normals, mean
  measured distance, mean points and densities for every profile.
- `scanpath.firstpass`: poses for the first pass (`low_density_areas`,
  `tilted_pose`, `first_iteration_poses`, `thin_first_iteration`).
- `scanpath.refine`: later passes (`refined_poses`, `enforce_forward_motion`,
  `merge_close_poses`).

## Examples

```python
from scanpath.vector3 import Vector3, cross_product, dot_product

x = Vector3(1.0, 0.0, 0.0)
y = Vector3(0.0, 1.0, 0.0)
cross_product(x, y)      # Vector3(x=0.0, y=0.0, z=1.0)
dot_product(x, y)        # 0.0
```

```python
from scanpath.stl import read_binary_stl, write_binary_stl

facets = read_binary_stl("part.stl")
write_binary_stl("copy.stl", facets, b"copied part")
```

### Refining a trajectory after a pass

```python
from scanpath.analysis import analyse_scan, normal_scan_image, profiles_in_roi
from scanpath.refine import enforce_forward_motion, merge_close_poses, refined_poses
from scanpath.trajfile import load_trajectory, read_point_file, save_trajectory
from scanpath.vector3 import Vector3

PER_PROFILE = 100
WORKING_DISTANCE = 100.0

simple = load_trajectory("scan/step_00_simple.xml")
interpolated = load_trajectory("scan/traj_sensor00.xml").points
points = read_point_file("scan/step_00_real.txt")
normals = read_point_file("scan/normal_data00.txt")
measurements = read_point_file("scan/step_error00.txt")

image = normal_scan_image(interpolated, normals, PER_PROFILE)
analysis = analyse_scan(interpolated, points, normals, measurements, image, PER_PROFILE)

# Without a region of interest:
positions, orientations, _ = refined_poses(
    simple.points, interpolated, analysis, None, WORKING_DISTANCE
)
positions, orientations, _ = enforce_forward_motion(
    positions, orientations, None, analysis, WORKING_DISTANCE
)
positions, orientations = merge_close_poses(positions, orientations)

# With one, pass per-profile flags to refined_poses and the per-pose flags
# it returns to enforce_forward_motion:
roi = (Vector3(0.0, -50.0, 100.0), Vector3(40.0, 50.0, 300.0))
inside = set(profiles_in_roi(len(interpolated), points, simple.resolution, roi, PER_PROFILE))
profile_flags = [1 if i in inside else 0 for i in range(len(interpolated))]

save_trajectory(
    "scan/", "step_00_new_traj.xml", positions, orientations,
    simple.fps, simple.velocity, simple.fov, simple.resolution, simple.uncertainty,
)
```

For the first pass, `first_iteration_poses` (with the list of profile ids in
the region of interest, or `None`) gives the key poses, and
`thin_first_iteration` drops the inner poses of the first run of similar
orientations.

## What it does not do

The package holds the steps, not a driver: nothing here reads a whole pass
directory, runs the steps in order and writes the results back, and there is
no command-line program. It has no sensor model and no ray casting, so it
cannot simulate a scan itself; the point, normal and measurement files must
come from elsewhere. It has no quaternion type and no rendering.

## Tests

The tests use pytest, listed under the `test` extra:

```
pip install -e .[test]
pytest
```