import argparse
import os
import shlex
from camgridlib.core.project import CamgridProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Export a camgrid plan as a shell script")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='project yaml with canvas, timeline and sources')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output shell script path')
	args = parser.parse_args()
	return args

#============================================

def concat_list_line(path: str) -> str:
	escaped = path.replace("'", "'\\''")
	return f"file '{escaped}'"

#============================================

class ScriptExporter():
	def __init__(self, yaml_file: str, output_file: str = None,
		output_override: str = None):
		self.yaml_file = yaml_file
		self.output_file = output_file or self._default_output_path()
		self.project = CamgridProject(self.yaml_file,
			output_override=output_override, dry_run=True)

	#============================
	def _default_output_path(self) -> str:
		base, _ = os.path.splitext(self.yaml_file)
		return base + ".sh"

	#============================
	def concat_list_path(self) -> str:
		base, _ = os.path.splitext(self.output_file)
		return base + ".concat.txt"

	#============================
	def export(self) -> None:
		plan = self.project.plan()
		lines = []
		lines.append("#!/bin/sh")
		lines.append(f"# camgrid segments for {os.path.basename(self.yaml_file)}")
		lines.append("set -e")
		for command in plan.commands:
			lines.append(f"# segment {command.index}: {command.start_ms}ms - {command.end_ms}ms")
			lines.append(shlex.join(command.argv))
		with open(self.output_file, 'w') as script_file:
			script_file.write("\n".join(lines))
			script_file.write("\n")
		os.chmod(self.output_file, 0o755)
		with open(self.concat_list_path(), 'w') as list_file:
			for command in plan.commands:
				list_file.write(concat_list_line(command.output_file))
				list_file.write("\n")

#============================================

def main():
	args = parse_args()
	exporter = ScriptExporter(args.yamlfile, args.output_file)
	exporter.export()


if __name__ == '__main__':
	main()
