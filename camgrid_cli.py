#!/usr/bin/env python3

import argparse
from camgridlib.core import utils
from camgridlib.core.project import CamgridProject
from camgridlib.exporters.script import ScriptExporter

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Multiple webcam grid compositor")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='project yaml with canvas, timeline and sources')
	parser.add_argument('-o', '--output', dest='output_prefix',
		help='override output prefix for segment files')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='validate only, do not print commands')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the segment plan as yaml')
	parser.add_argument('-s', '--script', dest='script_file',
		help='write the segment commands to a shell script')
	parser.add_argument('-j', '--workers', dest='workers', type=int, default=1,
		help='threads used to lay out and compile segments')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress progress output')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	if args.script_file is not None:
		exporter = ScriptExporter(args.yamlfile, args.script_file,
			output_override=args.output_prefix)
		exporter.export()
		utils.log(f"wrote {args.script_file}")
		return
	project = CamgridProject(args.yamlfile, output_override=args.output_prefix,
		dry_run=args.dry_run, workers=args.workers)
	if args.dump_plan:
		print(project.dump_plan())
		return
	project.run()


if __name__ == '__main__':
	main()
